from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field

from masarnia.domaine.enums.types import StatutLotProduction, TypeSourceMatiere


class _LigneBase(BaseModel):
    quantite: float = Field(..., gt=0)
    unite: str = Field(default="kg", min_length=1, max_length=20)


class LigneMatierePremiere(_LigneBase):
    type_source: Literal["RAW_MATERIAL"]
    matiere_premiere_id: UUID
    reception_id: UUID | None = None


class LigneLotSalaison(_LigneBase):
    type_source: Literal["CURING_BATCH"]
    lot_salaison_id: UUID


class LigneMateriau(_LigneBase):
    type_source: Literal["MATERIAL"]
    materiau_id: UUID
    reception_materiau_id: UUID | None = None


LigneMatiere = Annotated[
    Union[LigneMatierePremiere, LigneLotSalaison, LigneMateriau],
    Field(discriminator="type_source"),
]


class RequeteCreationLotProduction(BaseModel):
    produit_id: UUID
    quantite: float = Field(..., gt=0)
    unite: str = Field(default="kg", min_length=1, max_length=20)
    date_production: date | None = None
    heure_debut: datetime | None = None
    notes: str | None = None
    lignes: list[LigneMatiere] = Field(default_factory=list)


class LotProductionUpdate(BaseModel):
    """Correction de saisie d'un lot encore en cours."""

    quantite: float | None = Field(default=None, gt=0)
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    heure_debut: datetime | None = None
    notes: str | None = None


class RequeteTerminerLotProduction(BaseModel):
    temperature_finale: float | None = None
    heure_fin: datetime | None = None
    notes: str | None = None


class RequeteBloquerLotProduction(BaseModel):
    notes: str | None = None


class LigneMatiereLotOut(BaseModel):
    id: UUID
    type_source: TypeSourceMatiere
    matiere_premiere_id: UUID | None
    reception_id: UUID | None
    lot_salaison_id: UUID | None
    materiau_id: UUID | None
    reception_materiau_id: UUID | None
    quantite: float
    unite: str

    class Config:
        from_attributes = True


class LotProductionOut(BaseModel):
    id: UUID
    numero_lot: str
    produit_id: UUID
    quantite: float
    unite: str
    date_production: date
    date_peremption: date
    heure_debut: datetime | None
    heure_fin: datetime | None
    temperature_finale: float | None
    temperature_conforme: bool | None
    statut: StatutLotProduction
    notes: str | None
    operateur_id: UUID | None
    lignes_matiere: list[LigneMatiereLotOut] = Field(default_factory=list)

    class Config:
        from_attributes = True


class LotProductionResumeOut(BaseModel):
    id: UUID
    numero_lot: str
    produit_id: UUID
    quantite: float
    unite: str
    date_production: date
    date_peremption: date
    temperature_finale: float | None
    temperature_conforme: bool | None
    statut: StatutLotProduction

    class Config:
        from_attributes = True


class EvenementTracabiliteOut(BaseModel):
    moment: datetime
    type_evenement: str
    titre: str
    details: dict[str, str]

    class Config:
        from_attributes = True


class ChronologieLotOut(BaseModel):
    lot_id: UUID
    numero_lot: str
    nom_produit: str
    evenements: list[EvenementTracabiliteOut]

    class Config:
        from_attributes = True


class MatiereDisponibleOut(BaseModel):
    """Entrée utilisable dans un lot : réception de viande, salaison terminée, matériau en stock."""

    type_source: TypeSourceMatiere
    id: UUID
    libelle: str
    numero_lot: str | None
    quantite_disponible: float
    unite: str
    reception_id: UUID | None = None


class MatieresDisponiblesOut(BaseModel):
    matieres_premieres: list[MatiereDisponibleOut]
    lots_salaison: list[MatiereDisponibleOut]
    materiaux: list[MatiereDisponibleOut]
