from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from masarnia.domaine.enums.types import MethodeSalaison, StatutLotSalaison


class RequeteCreationLotSalaison(BaseModel):
    nom_produit: str = Field(..., min_length=1, max_length=200)
    quantite: float = Field(..., gt=0)
    unite: str = Field(default="kg", min_length=1, max_length=20)
    date_debut: date | None = None
    methode: MethodeSalaison = MethodeSalaison.DRY
    reception_id: UUID | None = None
    description_viande: str | None = Field(default=None, max_length=300)

    pourcentage_sel_nitrite: float | None = Field(default=None, ge=0, le=100)

    saumure_eau: float | None = Field(default=None, ge=0)
    saumure_sel: float | None = Field(default=None, ge=0)
    saumure_maggi: float | None = Field(default=None, ge=0)
    saumure_sucre: float | None = Field(default=None, ge=0)

    duree_prevue_jours: int | None = Field(default=None, ge=1)
    temperature: float | None = None
    notes: str | None = None


class LotSalaisonUpdate(BaseModel):
    """Correction de saisie d'un lot en cours ; le statut passe par /complete ou /cancel."""

    nom_produit: str | None = Field(default=None, min_length=1, max_length=200)
    description_viande: str | None = Field(default=None, max_length=300)
    saumure_eau: float | None = Field(default=None, ge=0)
    saumure_sel: float | None = Field(default=None, ge=0)
    saumure_maggi: float | None = Field(default=None, ge=0)
    saumure_sucre: float | None = Field(default=None, ge=0)
    date_fin_prevue: date | None = None
    temperature: float | None = None
    notes: str | None = None


class RequeteTerminerLotSalaison(BaseModel):
    date_fin_reelle: date | None = None
    notes: str | None = None


class PrelevementOut(BaseModel):
    reception_materiau_id: UUID
    quantite: float


class DeductionSelOut(BaseModel):
    materiau_id: UUID | None
    quantite_demandee: float
    quantite_deduite: float
    complete: bool
    prelevements: list[PrelevementOut]


class LotSalaisonOut(BaseModel):
    id: UUID
    numero_lot: str
    reception_id: UUID | None
    nom_produit: str
    quantite: float
    unite: str
    methode: MethodeSalaison
    description_viande: str | None
    pourcentage_sel_nitrite: float | None
    saumure_eau: float | None
    saumure_sel: float | None
    saumure_maggi: float | None
    saumure_sucre: float | None
    date_debut: date
    date_fin_prevue: date
    date_fin_reelle: date | None
    temperature: float | None
    notes: str | None
    statut: StatutLotSalaison
    utilisateur_id: UUID | None
    cree_le: datetime

    class Config:
        from_attributes = True


class ReponseCreationLotSalaison(BaseModel):
    lot: LotSalaisonOut
    deduction_sel: DeductionSelOut | None = None


class LotSalaisonDisponibleOut(BaseModel):
    lot: LotSalaisonOut
    quantite_utilisee: float
    quantite_disponible: float

    class Config:
        from_attributes = True
