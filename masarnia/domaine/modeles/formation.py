from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.modeles.base import ModeleHorodate


class Formation(ModeleHorodate):
    __tablename__ = "formation"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    titre: Mapped[str] = mapped_column(String(200), nullable=False)
    type_formation: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    formateur: Mapped[str | None] = mapped_column(String(200), nullable=True)

    date_formation: Mapped[date] = mapped_column(Date, nullable=False)
    valide_jusqu_au: Mapped[date | None] = mapped_column(Date, nullable=True)

    participants = relationship(
        "ParticipantFormation",
        back_populates="formation",
        cascade="all, delete-orphan",
    )


class ParticipantFormation(ModeleHorodate):
    __tablename__ = "participant_formation"
    __table_args__ = (UniqueConstraint("formation_id", "utilisateur_id", name="uq_participant_formation"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    formation_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("formation.id", ondelete="CASCADE"), nullable=False, index=True
    )
    utilisateur_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=False)

    reussi: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    formation = relationship("Formation", back_populates="participants")
