from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from masarnia.domaine.enums.types import CategorieMatierePremiere


# ===== Fournisseurs =====


class FournisseurCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    adresse: str | None = Field(default=None, max_length=300)
    telephone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)
    numero_veterinaire: str | None = Field(default=None, max_length=50)
    contact: str | None = Field(default=None, max_length=200)
    agree: bool = False
    notes: str | None = None
    actif: bool = True


class FournisseurUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    adresse: str | None = Field(default=None, max_length=300)
    telephone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)
    numero_veterinaire: str | None = Field(default=None, max_length=50)
    contact: str | None = Field(default=None, max_length=200)
    agree: bool | None = None
    notes: str | None = None
    actif: bool | None = None


class FournisseurOut(BaseModel):
    id: UUID
    nom: str
    adresse: str | None
    telephone: str | None
    email: str | None
    numero_veterinaire: str | None
    contact: str | None
    agree: bool
    notes: str | None
    actif: bool

    class Config:
        from_attributes = True


# ===== Matières premières =====


class MatierePremiereCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    categorie: CategorieMatierePremiere
    unite: str = Field(default="kg", min_length=1, max_length=20)
    fournisseur_id: UUID | None = None
    conditions_stockage: str | None = Field(default=None, max_length=300)
    duree_conservation_jours: int | None = Field(default=None, ge=0)
    allergenes: str | None = Field(default=None, max_length=300)
    actif: bool = True


class MatierePremiereUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    categorie: CategorieMatierePremiere | None = None
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    fournisseur_id: UUID | None = None
    conditions_stockage: str | None = Field(default=None, max_length=300)
    duree_conservation_jours: int | None = Field(default=None, ge=0)
    allergenes: str | None = Field(default=None, max_length=300)
    actif: bool | None = None


class MatierePremiereOut(BaseModel):
    id: UUID
    nom: str
    categorie: CategorieMatierePremiere
    unite: str
    fournisseur_id: UUID | None
    conditions_stockage: str | None
    duree_conservation_jours: int | None
    allergenes: str | None
    actif: bool

    class Config:
        from_attributes = True


# ===== Matériaux =====


class MateriauCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    categorie: str = Field(default="OTHER", min_length=1, max_length=50)
    unite: str = Field(default="kg", min_length=1, max_length=20)
    fournisseur_id: UUID | None = None
    stock_minimum: float | None = Field(default=None, ge=0)
    conditions_stockage: str | None = Field(default=None, max_length=300)
    allergenes: str | None = Field(default=None, max_length=300)
    actif: bool = True


class MateriauUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    categorie: str | None = Field(default=None, min_length=1, max_length=50)
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    fournisseur_id: UUID | None = None
    stock_minimum: float | None = Field(default=None, ge=0)
    conditions_stockage: str | None = Field(default=None, max_length=300)
    allergenes: str | None = Field(default=None, max_length=300)
    actif: bool | None = None


class MateriauOut(BaseModel):
    id: UUID
    nom: str
    categorie: str
    unite: str
    fournisseur_id: UUID | None
    stock_minimum: float | None
    stock_actuel: float
    conditions_stockage: str | None
    allergenes: str | None
    actif: bool

    class Config:
        from_attributes = True


# ===== Produits =====


class ProduitCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    categorie: str | None = Field(default=None, max_length=120)
    description: str | None = None
    unite: str = Field(default="kg", min_length=1, max_length=20)
    duree_conservation_jours: int = Field(default=7, ge=0)
    temperature_stockage: str | None = Field(default=None, max_length=50)
    allergenes: str | None = Field(default=None, max_length=300)
    temperature_requise: float | None = None
    actif: bool = True


class ProduitUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    categorie: str | None = Field(default=None, max_length=120)
    description: str | None = None
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    duree_conservation_jours: int | None = Field(default=None, ge=0)
    temperature_stockage: str | None = Field(default=None, max_length=50)
    allergenes: str | None = Field(default=None, max_length=300)
    temperature_requise: float | None = None
    actif: bool | None = None


class ProduitOut(BaseModel):
    id: UUID
    nom: str
    categorie: str | None
    description: str | None
    unite: str
    duree_conservation_jours: int
    temperature_stockage: str | None
    allergenes: str | None
    temperature_requise: float | None
    actif: bool

    class Config:
        from_attributes = True


# ===== Paramètres entreprise =====


class ParametresEntrepriseUpdate(BaseModel):
    nom_entreprise: str | None = Field(default=None, min_length=1, max_length=200)
    adresse: str | None = Field(default=None, max_length=300)
    numero_veterinaire: str | None = Field(default=None, max_length=50)
    telephone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)
    largeur_etiquette_mm: int | None = Field(default=None, ge=20, le=200)
    hauteur_etiquette_mm: int | None = Field(default=None, ge=15, le=200)


class ParametresEntrepriseOut(BaseModel):
    id: UUID
    nom_entreprise: str
    adresse: str | None
    numero_veterinaire: str | None
    telephone: str | None
    email: str | None
    largeur_etiquette_mm: int
    hauteur_etiquette_mm: int

    class Config:
        from_attributes = True
