from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class ChecklistAuditCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    categorie: str | None = Field(default=None, max_length=120)
    points: list[str] = Field(default_factory=list)
    actif: bool = True


class ChecklistAuditUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    categorie: str | None = Field(default=None, max_length=120)
    points: list[str] | None = None
    actif: bool | None = None


class ChecklistAuditOut(BaseModel):
    id: UUID
    nom: str
    categorie: str | None
    points: list[Any]
    actif: bool

    class Config:
        from_attributes = True


class RequeteEnregistrementAudit(BaseModel):
    """`resultats` : liste de {point, conforme, notes} ou dictionnaire {point: conforme}."""

    checklist_id: UUID
    auditeur: str = Field(..., min_length=1, max_length=200)
    resultats: list[dict[str, Any]] | dict[str, Any] | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    constatations: str | None = None
    recommandations: str | None = None
    date_audit: datetime | None = None


class EnregistrementAuditUpdate(BaseModel):
    auditeur: str | None = Field(default=None, min_length=1, max_length=200)
    resultats: list[dict[str, Any]] | dict[str, Any] | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    constatations: str | None = None
    recommandations: str | None = None
    date_audit: datetime | None = None


class EnregistrementAuditOut(BaseModel):
    id: UUID
    checklist_id: UUID
    auditeur: str
    resultats: list[Any]
    score: int
    constatations: str | None
    recommandations: str | None
    date_audit: datetime
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True
