from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from masarnia.domaine.enums.types import (
    FrequenceNettoyage,
    StatutControleNuisibles,
    TypePointNuisibles,
    TypePointTemperature,
)


# ===== Températures =====


class PointTemperatureCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    emplacement: str | None = Field(default=None, max_length=200)
    type_point: TypePointTemperature
    temperature_min: float
    temperature_max: float
    ccp_id: UUID | None = None
    actif: bool = True

    @model_validator(mode="after")
    def _verifier_plage(self) -> "PointTemperatureCreate":
        if self.temperature_min > self.temperature_max:
            raise ValueError("temperature_min doit être <= temperature_max.")
        return self


class PointTemperatureUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    emplacement: str | None = Field(default=None, max_length=200)
    type_point: TypePointTemperature | None = None
    temperature_min: float | None = None
    temperature_max: float | None = None
    ccp_id: UUID | None = None
    actif: bool | None = None


class PointTemperatureOut(BaseModel):
    id: UUID
    nom: str
    emplacement: str | None
    type_point: TypePointTemperature
    temperature_min: float
    temperature_max: float
    ccp_id: UUID | None
    actif: bool

    class Config:
        from_attributes = True


class RequeteReleveTemperature(BaseModel):
    point_temperature_id: UUID
    temperature: float
    notes: str | None = Field(default=None, max_length=500)
    releve_le: datetime | None = None


class ReleveTemperatureOut(BaseModel):
    id: UUID
    point_temperature_id: UUID
    temperature: float
    conforme: bool
    notes: str | None
    releve_le: datetime
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True


class TendanceTemperatureOut(BaseModel):
    point_temperature_id: UUID
    nom_point: str
    jour: date
    moyenne: float
    minimum: float
    maximum: float
    nb_releves: int
    nb_non_conformes: int

    class Config:
        from_attributes = True


# ===== Nettoyage =====


class ZoneNettoyageCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    emplacement: str | None = Field(default=None, max_length=200)
    frequence: FrequenceNettoyage = FrequenceNettoyage.DAILY
    methode: str | None = Field(default=None, max_length=300)
    produits_chimiques: str | None = Field(default=None, max_length=300)
    actif: bool = True


class ZoneNettoyageUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    emplacement: str | None = Field(default=None, max_length=200)
    frequence: FrequenceNettoyage | None = None
    methode: str | None = Field(default=None, max_length=300)
    produits_chimiques: str | None = Field(default=None, max_length=300)
    actif: bool | None = None


class ZoneNettoyageOut(BaseModel):
    id: UUID
    nom: str
    emplacement: str | None
    frequence: FrequenceNettoyage
    methode: str | None
    produits_chimiques: str | None
    actif: bool

    class Config:
        from_attributes = True


class EnregistrementNettoyageCreate(BaseModel):
    zone_nettoyage_id: UUID
    methode: str | None = Field(default=None, max_length=300)
    produits_chimiques: str | None = Field(default=None, max_length=300)
    verifie: bool = False
    notes: str | None = None
    nettoye_le: datetime | None = None


class EnregistrementNettoyageOut(BaseModel):
    id: UUID
    zone_nettoyage_id: UUID
    methode: str | None
    produits_chimiques: str | None
    verifie: bool
    notes: str | None
    nettoye_le: datetime
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True


# ===== Nuisibles =====


class PointNuisiblesCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=200)
    emplacement: str | None = Field(default=None, max_length=200)
    type_point: TypePointNuisibles
    actif: bool = True


class PointNuisiblesUpdate(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    emplacement: str | None = Field(default=None, max_length=200)
    type_point: TypePointNuisibles | None = None
    actif: bool | None = None


class PointNuisiblesOut(BaseModel):
    id: UUID
    nom: str
    emplacement: str | None
    type_point: TypePointNuisibles
    actif: bool

    class Config:
        from_attributes = True


class RequeteControleNuisibles(BaseModel):
    point_nuisibles_id: UUID
    statut: StatutControleNuisibles
    constatations: str | None = None
    action_menee: str | None = None
    controle_le: datetime | None = None


class ControleNuisiblesOut(BaseModel):
    id: UUID
    point_nuisibles_id: UUID
    statut: StatutControleNuisibles
    constatations: str | None
    action_menee: str | None
    controle_le: datetime
    utilisateur_id: UUID | None

    class Config:
        from_attributes = True
