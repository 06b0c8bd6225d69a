from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.enums.types import (
    NiveauRisque,
    OrigineActionCorrective,
    PrioriteActionCorrective,
    StatutActionCorrective,
    TypeDanger,
)
from masarnia.domaine.modeles.base import ModeleHorodate


class CCP(ModeleHorodate):
    """Point critique pour la maîtrise du plan HACCP."""

    __tablename__ = "ccp"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Code court référencé par la configuration (ex: CCP3 = traitement thermique).
    code: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)
    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type_danger: Mapped[TypeDanger | None] = mapped_column(
        Enum(TypeDanger, native_enum=False, length=50),
        nullable=True,
    )
    limite_critique: Mapped[str | None] = mapped_column(String(300), nullable=True)
    methode_surveillance: Mapped[str | None] = mapped_column(String(300), nullable=True)
    frequence_surveillance: Mapped[str | None] = mapped_column(String(120), nullable=True)
    action_corrective: Mapped[str | None] = mapped_column(Text, nullable=True)
    verification: Mapped[str | None] = mapped_column(Text, nullable=True)
    enregistrements: Mapped[str | None] = mapped_column(Text, nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Danger(ModeleHorodate):
    __tablename__ = "danger"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    type_danger: Mapped[TypeDanger] = mapped_column(
        Enum(TypeDanger, native_enum=False, length=50),
        nullable=False,
    )
    source: Mapped[str | None] = mapped_column(String(300), nullable=True)
    mesure_preventive: Mapped[str | None] = mapped_column(Text, nullable=True)
    gravite: Mapped[NiveauRisque] = mapped_column(Enum(NiveauRisque, native_enum=False, length=50), nullable=False)
    probabilite: Mapped[NiveauRisque] = mapped_column(
        Enum(NiveauRisque, native_enum=False, length=50),
        nullable=False,
    )
    # gravité x probabilité, de 1 à 9.
    significativite: Mapped[int] = mapped_column(nullable=False)
    etape_procede: Mapped[str | None] = mapped_column(String(200), nullable=True)

    ccp_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("ccp.id"), nullable=True)


class ActionCorrective(ModeleHorodate):
    """Action corrective, saisie à la main ou ouverte par un contrôle non conforme.

    `origine` + `reference` désignent l'enregistrement qui l'a déclenchée
    (point de température, réception, audit, point nuisibles, lot de production).
    """

    __tablename__ = "action_corrective"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    titre: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    cause: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_menee: Mapped[str | None] = mapped_column(Text, nullable=True)

    statut: Mapped[StatutActionCorrective] = mapped_column(
        Enum(StatutActionCorrective, native_enum=False, length=50),
        nullable=False,
        default=StatutActionCorrective.OPEN,
    )
    priorite: Mapped[PrioriteActionCorrective] = mapped_column(
        Enum(PrioriteActionCorrective, native_enum=False, length=50),
        nullable=False,
        default=PrioriteActionCorrective.MEDIUM,
    )

    echeance: Mapped[date | None] = mapped_column(Date, nullable=True)
    realisee_le: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    origine: Mapped[OrigineActionCorrective] = mapped_column(
        Enum(OrigineActionCorrective, native_enum=False, length=50),
        nullable=False,
        default=OrigineActionCorrective.MANUAL,
    )
    reference: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)

    ccp_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("ccp.id"), nullable=True)
    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    ccp = relationship("CCP")
