from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.modeles.base import ModeleHorodate


class Decoupe(ModeleHorodate):
    """Découpe (rozbiór) d'une réception de carcasses en éléments."""

    __tablename__ = "decoupe"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    reception_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("reception_matiere_premiere.id"), nullable=True
    )
    numero_lot: Mapped[str] = mapped_column(String(120), nullable=False)
    date_decoupe: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    elements = relationship(
        "ElementDecoupe",
        back_populates="decoupe",
        cascade="all, delete-orphan",
    )


class ElementDecoupe(ModeleHorodate):
    __tablename__ = "element_decoupe"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    decoupe_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("decoupe.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nom_element: Mapped[str] = mapped_column(String(200), nullable=False)
    quantite: Mapped[float] = mapped_column(nullable=False)
    destination: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    decoupe = relationship("Decoupe", back_populates="elements")
