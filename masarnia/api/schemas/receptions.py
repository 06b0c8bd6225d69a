from __future__ import annotations

from datetime import date, datetime, time, timezone
from uuid import UUID

from pydantic import BaseModel, Field


class RequeteReceptionMatierePremiere(BaseModel):
    matiere_premiere_id: UUID
    fournisseur_id: UUID
    numero_lot: str = Field(..., min_length=1, max_length=120)
    quantite: float = Field(..., gt=0)
    unite: str = Field(default="kg", min_length=1, max_length=20)
    date_peremption: date | None = None
    temperature: float | None = None
    conforme: bool = True

    vehicule_propre: bool | None = None
    temperature_vehicule: float | None = None
    emballage_intact: bool | None = None
    documents_complets: bool | None = None

    numero_document: str | None = Field(default=None, max_length=120)
    notes: str | None = None

    # Saisie usuelle : date + heure de réception séparées (heure par défaut : midi).
    date_reception: date | None = None
    heure_reception: time | None = None

    def moment_reception(self) -> datetime | None:
        if self.date_reception is None:
            return None
        return datetime.combine(self.date_reception, self.heure_reception or time(12, 0), tzinfo=timezone.utc)


class ReceptionMatierePremiereUpdate(BaseModel):
    numero_lot: str | None = Field(default=None, min_length=1, max_length=120)
    quantite: float | None = Field(default=None, gt=0)
    unite: str | None = Field(default=None, min_length=1, max_length=20)
    date_peremption: date | None = None
    temperature: float | None = None
    vehicule_propre: bool | None = None
    temperature_vehicule: float | None = None
    emballage_intact: bool | None = None
    documents_complets: bool | None = None
    numero_document: str | None = Field(default=None, max_length=120)
    notes: str | None = None
    date_reception: date | None = None
    heure_reception: time | None = None


class ReceptionMatierePremiereOut(BaseModel):
    id: UUID
    matiere_premiere_id: UUID
    fournisseur_id: UUID
    numero_lot: str
    quantite: float
    unite: str
    date_peremption: date | None
    temperature: float | None
    conforme: bool
    vehicule_propre: bool | None
    temperature_vehicule: float | None
    emballage_intact: bool | None
    documents_complets: bool | None
    numero_document: str | None
    notes: str | None
    recue_le: datetime
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True


class RequeteReceptionMateriau(BaseModel):
    materiau_id: UUID
    numero_lot: str = Field(..., min_length=1, max_length=120)
    quantite: float = Field(..., gt=0)
    unite: str = Field(default="kg", min_length=1, max_length=20)
    fournisseur_id: UUID | None = None
    date_peremption: date | None = None
    prix_unitaire: float | None = Field(default=None, ge=0)
    numero_document: str | None = Field(default=None, max_length=120)
    notes: str | None = None
    recue_le: datetime | None = None


class ReceptionMateriauOut(BaseModel):
    id: UUID
    materiau_id: UUID
    fournisseur_id: UUID | None
    numero_lot: str
    quantite: float
    unite: str
    date_peremption: date | None
    prix_unitaire: float | None
    numero_document: str | None
    notes: str | None
    recue_le: datetime

    class Config:
        from_attributes = True
