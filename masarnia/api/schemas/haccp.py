from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from masarnia.domaine.enums.types import (
    NiveauRisque,
    OrigineActionCorrective,
    PrioriteActionCorrective,
    StatutActionCorrective,
    TypeDanger,
)


# ===== CCP =====


class CCPCreate(BaseModel):
    code: str | None = Field(default=None, max_length=20)
    nom: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    type_danger: TypeDanger | None = None
    limite_critique: str | None = Field(default=None, max_length=300)
    methode_surveillance: str | None = Field(default=None, max_length=300)
    frequence_surveillance: str | None = Field(default=None, max_length=120)
    action_corrective: str | None = None
    verification: str | None = None
    enregistrements: str | None = None
    actif: bool = True


class CCPUpdate(BaseModel):
    code: str | None = Field(default=None, max_length=20)
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    type_danger: TypeDanger | None = None
    limite_critique: str | None = Field(default=None, max_length=300)
    methode_surveillance: str | None = Field(default=None, max_length=300)
    frequence_surveillance: str | None = Field(default=None, max_length=120)
    action_corrective: str | None = None
    verification: str | None = None
    enregistrements: str | None = None
    actif: bool | None = None


class CCPOut(BaseModel):
    id: UUID
    code: str | None
    nom: str
    description: str | None
    type_danger: TypeDanger | None
    limite_critique: str | None
    methode_surveillance: str | None
    frequence_surveillance: str | None
    action_corrective: str | None
    verification: str | None
    enregistrements: str | None
    actif: bool

    class Config:
        from_attributes = True


# ===== Dangers =====


class DangerCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    type_danger: TypeDanger
    source: str | None = Field(default=None, max_length=300)
    mesure_preventive: str | None = None
    gravite: NiveauRisque
    probabilite: NiveauRisque
    etape_procede: str | None = Field(default=None, max_length=200)
    ccp_id: UUID | None = None


class DangerUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    type_danger: TypeDanger | None = None
    source: str | None = Field(default=None, max_length=300)
    mesure_preventive: str | None = None
    gravite: NiveauRisque | None = None
    probabilite: NiveauRisque | None = None
    etape_procede: str | None = Field(default=None, max_length=200)
    ccp_id: UUID | None = None


class DangerOut(BaseModel):
    id: UUID
    nom: str
    type_danger: TypeDanger
    source: str | None
    mesure_preventive: str | None
    gravite: NiveauRisque
    probabilite: NiveauRisque
    significativite: int
    etape_procede: str | None
    ccp_id: UUID | None

    class Config:
        from_attributes = True


# ===== Actions correctives =====


class ActionCorrectiveCreate(BaseModel):
    titre: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    cause: str | None = None
    action_menee: str | None = None
    priorite: PrioriteActionCorrective = PrioriteActionCorrective.MEDIUM
    echeance: date | None = None
    reference: str | None = Field(default=None, max_length=120)
    ccp_id: UUID | None = None


class ActionCorrectiveUpdate(BaseModel):
    titre: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, min_length=1)
    cause: str | None = None
    action_menee: str | None = None
    statut: StatutActionCorrective | None = None
    priorite: PrioriteActionCorrective | None = None
    echeance: date | None = None
    ccp_id: UUID | None = None


class ActionCorrectiveOut(BaseModel):
    id: UUID
    titre: str
    description: str
    cause: str | None
    action_menee: str | None
    statut: StatutActionCorrective
    priorite: PrioriteActionCorrective
    echeance: date | None
    realisee_le: datetime | None
    origine: OrigineActionCorrective
    reference: str | None
    ccp_id: UUID | None
    utilisateur_id: UUID | None
    cree_le: datetime

    class Config:
        from_attributes = True
