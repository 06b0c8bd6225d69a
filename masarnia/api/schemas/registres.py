from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from masarnia.domaine.enums.types import CategorieDocument


# ===== Formations =====


class ParticipantFormationIn(BaseModel):
    utilisateur_id: UUID
    reussi: bool | None = None
    notes: str | None = Field(default=None, max_length=500)


class ParticipantFormationOut(BaseModel):
    id: UUID
    utilisateur_id: UUID
    reussi: bool | None
    notes: str | None

    class Config:
        from_attributes = True


class FormationCreate(BaseModel):
    titre: str = Field(..., min_length=1, max_length=200)
    type_formation: str = Field(..., min_length=1, max_length=120)
    description: str | None = None
    formateur: str | None = Field(default=None, max_length=200)
    date_formation: date
    valide_jusqu_au: date | None = None
    participants: list[ParticipantFormationIn] = Field(default_factory=list)


class FormationUpdate(BaseModel):
    titre: str | None = Field(default=None, min_length=1, max_length=200)
    type_formation: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    formateur: str | None = Field(default=None, max_length=200)
    date_formation: date | None = None
    valide_jusqu_au: date | None = None


class FormationOut(BaseModel):
    id: UUID
    titre: str
    type_formation: str
    description: str | None
    formateur: str | None
    date_formation: date
    valide_jusqu_au: date | None
    participants: list[ParticipantFormationOut] = Field(default_factory=list)

    class Config:
        from_attributes = True


# ===== Documents =====


class DocumentCreate(BaseModel):
    titre: str = Field(..., min_length=1, max_length=300)
    categorie: CategorieDocument = CategorieDocument.OTHER
    nom_fichier: str | None = Field(default=None, max_length=300)
    chemin_fichier: str | None = Field(default=None, max_length=500)
    version: str = Field(default="1.0", min_length=1, max_length=20)
    valide_du: date | None = None
    valide_au: date | None = None


class DocumentUpdate(BaseModel):
    titre: str | None = Field(default=None, min_length=1, max_length=300)
    categorie: CategorieDocument | None = None
    nom_fichier: str | None = Field(default=None, max_length=300)
    chemin_fichier: str | None = Field(default=None, max_length=500)
    version: str | None = Field(default=None, min_length=1, max_length=20)
    valide_du: date | None = None
    valide_au: date | None = None


class DocumentOut(BaseModel):
    id: UUID
    titre: str
    categorie: CategorieDocument
    nom_fichier: str | None
    chemin_fichier: str | None
    version: str
    valide_du: date | None
    valide_au: date | None
    depose_par_id: UUID | None

    class Config:
        from_attributes = True


# ===== Laboratoire =====


class TypeAnalyseLaboCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    categorie: str = Field(..., min_length=1, max_length=120)
    unite: str | None = Field(default=None, max_length=50)
    norme_min: float | None = None
    norme_max: float | None = None
    norme_texte: str | None = Field(default=None, max_length=300)
    frequence: str | None = Field(default=None, max_length=120)
    description: str | None = None
    actif: bool = True


class TypeAnalyseLaboUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    categorie: str | None = Field(default=None, min_length=1, max_length=120)
    unite: str | None = Field(default=None, max_length=50)
    norme_min: float | None = None
    norme_max: float | None = None
    norme_texte: str | None = Field(default=None, max_length=300)
    frequence: str | None = Field(default=None, max_length=120)
    description: str | None = None
    actif: bool | None = None


class TypeAnalyseLaboOut(BaseModel):
    id: UUID
    nom: str
    categorie: str
    unite: str | None
    norme_min: float | None
    norme_max: float | None
    norme_texte: str | None
    frequence: str | None
    description: str | None
    actif: bool

    class Config:
        from_attributes = True


class AnalyseLaboCreate(BaseModel):
    type_analyse_id: UUID
    date_prelevement: date
    date_resultat: date | None = None
    origine_echantillon: str | None = Field(default=None, max_length=200)
    lot_echantillon: str | None = Field(default=None, max_length=120)
    resultat: str | None = Field(default=None, max_length=300)
    valeur_resultat: float | None = None
    conforme: bool | None = None
    laboratoire: str | None = Field(default=None, max_length=200)
    numero_document: str | None = Field(default=None, max_length=120)
    notes: str | None = None


class AnalyseLaboUpdate(BaseModel):
    date_resultat: date | None = None
    origine_echantillon: str | None = Field(default=None, max_length=200)
    lot_echantillon: str | None = Field(default=None, max_length=120)
    resultat: str | None = Field(default=None, max_length=300)
    valeur_resultat: float | None = None
    conforme: bool | None = None
    laboratoire: str | None = Field(default=None, max_length=200)
    numero_document: str | None = Field(default=None, max_length=120)
    notes: str | None = None


class AnalyseLaboOut(BaseModel):
    id: UUID
    type_analyse_id: UUID
    date_prelevement: date
    date_resultat: date | None
    origine_echantillon: str | None
    lot_echantillon: str | None
    resultat: str | None
    valeur_resultat: float | None
    conforme: bool | None
    laboratoire: str | None
    numero_document: str | None
    notes: str | None
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True


class SyntheseAnalysesOut(BaseModel):
    total: int
    conformes: int
    non_conformes: int
    en_attente: int
    taux_conformite: float


# ===== Déchets =====


class TypeDechetCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    categorie: str = Field(..., min_length=1, max_length=120)
    code: str | None = Field(default=None, max_length=50)
    description: str | None = None
    unite: str = Field(default="kg", min_length=1, max_length=20)
    actif: bool = True


class TypeDechetUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    categorie: str | None = Field(default=None, min_length=1, max_length=120)
    code: str | None = Field(default=None, max_length=50)
    description: str | None = None
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    actif: bool | None = None


class TypeDechetOut(BaseModel):
    id: UUID
    nom: str
    categorie: str
    code: str | None
    description: str | None
    unite: str
    actif: bool

    class Config:
        from_attributes = True


class CollecteurDechetsCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    adresse: str | None = Field(default=None, max_length=300)
    telephone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)
    numero_veterinaire: str | None = Field(default=None, max_length=50)
    numero_contrat: str | None = Field(default=None, max_length=120)
    contact: str | None = Field(default=None, max_length=200)
    actif: bool = True


class CollecteurDechetsUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    adresse: str | None = Field(default=None, max_length=300)
    telephone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320)
    numero_veterinaire: str | None = Field(default=None, max_length=50)
    numero_contrat: str | None = Field(default=None, max_length=120)
    contact: str | None = Field(default=None, max_length=200)
    actif: bool | None = None


class CollecteurDechetsOut(BaseModel):
    id: UUID
    nom: str
    adresse: str | None
    telephone: str | None
    email: str | None
    numero_veterinaire: str | None
    numero_contrat: str | None
    contact: str | None
    actif: bool

    class Config:
        from_attributes = True


class EnregistrementDechetCreate(BaseModel):
    type_dechet_id: UUID
    collecteur_id: UUID | None = None
    quantite: float = Field(..., gt=0)
    unite: str = Field(default="kg", min_length=1, max_length=20)
    date_collecte: date
    numero_document: str | None = Field(default=None, max_length=120)
    vehicule: str | None = Field(default=None, max_length=120)
    chauffeur: str | None = Field(default=None, max_length=200)
    notes: str | None = None


class EnregistrementDechetUpdate(BaseModel):
    collecteur_id: UUID | None = None
    quantite: float | None = Field(default=None, gt=0)
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    date_collecte: date | None = None
    numero_document: str | None = Field(default=None, max_length=120)
    vehicule: str | None = Field(default=None, max_length=120)
    chauffeur: str | None = Field(default=None, max_length=200)
    notes: str | None = None


class EnregistrementDechetOut(BaseModel):
    id: UUID
    type_dechet_id: UUID
    collecteur_id: UUID | None
    quantite: float
    unite: str
    date_collecte: date
    numero_document: str | None
    vehicule: str | None
    chauffeur: str | None
    notes: str | None
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True


class QuantiteParTypeOut(BaseModel):
    type_dechet_id: UUID
    nom: str
    unite: str
    quantite_totale: float
    nb_enlevements: int


class SyntheseDechetsOut(BaseModel):
    nb_enlevements: int
    par_type: list[QuantiteParTypeOut]


# ===== Découpe =====


class ElementDecoupeIn(BaseModel):
    nom_element: str = Field(..., min_length=1, max_length=200)
    quantite: float = Field(..., gt=0)
    destination: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=500)


class ElementDecoupeOut(BaseModel):
    id: UUID
    nom_element: str
    quantite: float
    destination: str | None
    notes: str | None

    class Config:
        from_attributes = True


class DecoupeCreate(BaseModel):
    reception_id: UUID | None = None
    numero_lot: str = Field(..., min_length=1, max_length=120)
    date_decoupe: date
    notes: str | None = None
    elements: list[ElementDecoupeIn] = Field(default_factory=list)


class DecoupeUpdate(BaseModel):
    """`elements`, s'il est fourni, remplace la liste complète."""

    reception_id: UUID | None = None
    numero_lot: str | None = Field(default=None, min_length=1, max_length=120)
    date_decoupe: date | None = None
    notes: str | None = None
    elements: list[ElementDecoupeIn] | None = None


class DecoupeOut(BaseModel):
    id: UUID
    reception_id: UUID | None
    numero_lot: str
    date_decoupe: date
    notes: str | None
    elements: list[ElementDecoupeOut] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ElementDisponibleOut(BaseModel):
    id: UUID
    decoupe_id: UUID
    numero_lot: str
    date_decoupe: date
    nom_element: str
    quantite: float
    destination: str | None
