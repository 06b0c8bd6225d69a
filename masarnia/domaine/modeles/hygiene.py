from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.enums.types import (
    FrequenceNettoyage,
    StatutControleNuisibles,
    TypePointNuisibles,
    TypePointTemperature,
)
from masarnia.domaine.modeles.base import ModeleHorodate, maintenant_utc


class PointTemperature(ModeleHorodate):
    __tablename__ = "point_temperature"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    emplacement: Mapped[str | None] = mapped_column(String(200), nullable=True)
    type_point: Mapped[TypePointTemperature] = mapped_column(
        Enum(TypePointTemperature, native_enum=False, length=50),
        nullable=False,
    )

    temperature_min: Mapped[float] = mapped_column(nullable=False)
    temperature_max: Mapped[float] = mapped_column(nullable=False)

    ccp_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("ccp.id"), nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ReleveTemperature(ModeleHorodate):
    """Relevé de température, immuable une fois créé.

    `conforme` est figé à l'écriture : il n'est pas recalculé si les seuils du
    point changent ensuite.
    """

    __tablename__ = "releve_temperature"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    point_temperature_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("point_temperature.id"), nullable=False)

    temperature: Mapped[float] = mapped_column(nullable=False)
    conforme: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    releve_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    point_temperature = relationship("PointTemperature")


Index("ix_releve_temperature_point_date", ReleveTemperature.point_temperature_id, ReleveTemperature.releve_le)


class ZoneNettoyage(ModeleHorodate):
    __tablename__ = "zone_nettoyage"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    emplacement: Mapped[str | None] = mapped_column(String(200), nullable=True)
    frequence: Mapped[FrequenceNettoyage] = mapped_column(
        Enum(FrequenceNettoyage, native_enum=False, length=50),
        nullable=False,
        default=FrequenceNettoyage.DAILY,
    )
    methode: Mapped[str | None] = mapped_column(String(300), nullable=True)
    produits_chimiques: Mapped[str | None] = mapped_column(String(300), nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class EnregistrementNettoyage(ModeleHorodate):
    __tablename__ = "enregistrement_nettoyage"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    zone_nettoyage_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("zone_nettoyage.id"), nullable=False)

    methode: Mapped[str | None] = mapped_column(String(300), nullable=True)
    produits_chimiques: Mapped[str | None] = mapped_column(String(300), nullable=True)
    verifie: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    nettoye_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    zone_nettoyage = relationship("ZoneNettoyage")


class PointNuisibles(ModeleHorodate):
    """Point de lutte contre les nuisibles (appât, piège, lampe UV)."""

    __tablename__ = "point_nuisibles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    emplacement: Mapped[str | None] = mapped_column(String(200), nullable=True)
    type_point: Mapped[TypePointNuisibles] = mapped_column(
        Enum(TypePointNuisibles, native_enum=False, length=50),
        nullable=False,
    )
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ControleNuisibles(ModeleHorodate):
    __tablename__ = "controle_nuisibles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    point_nuisibles_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("point_nuisibles.id"), nullable=False)

    statut: Mapped[StatutControleNuisibles] = mapped_column(
        Enum(StatutControleNuisibles, native_enum=False, length=50),
        nullable=False,
    )
    constatations: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_menee: Mapped[str | None] = mapped_column(Text, nullable=True)

    controle_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    point_nuisibles = relationship("PointNuisibles")
