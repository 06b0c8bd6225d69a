from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.modeles.base import ModeleHorodate, maintenant_utc


class ReceptionMatierePremiere(ModeleHorodate):
    """Réception de matière première (contrôle à quai).

    `conforme` est saisi par l'opérateur ; une réception non conforme ouvre une
    action corrective.
    """

    __tablename__ = "reception_matiere_premiere"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    matiere_premiere_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("matiere_premiere.id"), nullable=False)
    fournisseur_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("fournisseur.id"), nullable=False)

    numero_lot: Mapped[str] = mapped_column(String(120), nullable=False)
    quantite: Mapped[float] = mapped_column(nullable=False)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")
    date_peremption: Mapped[date | None] = mapped_column(Date, nullable=True)

    temperature: Mapped[float | None] = mapped_column(nullable=True)
    conforme: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    vehicule_propre: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    temperature_vehicule: Mapped[float | None] = mapped_column(nullable=True)
    emballage_intact: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    documents_complets: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    numero_document: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    recue_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    matiere_premiere = relationship("MatierePremiere")
    fournisseur = relationship("Fournisseur")


class ReceptionMateriau(ModeleHorodate):
    """Réception d'un matériau ; `quantite` est le solde encore disponible."""

    __tablename__ = "reception_materiau"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    materiau_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("materiau.id"), nullable=False)
    fournisseur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("fournisseur.id"), nullable=True)

    numero_lot: Mapped[str] = mapped_column(String(120), nullable=False)
    quantite: Mapped[float] = mapped_column(nullable=False)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")
    date_peremption: Mapped[date | None] = mapped_column(Date, nullable=True)
    prix_unitaire: Mapped[float | None] = mapped_column(nullable=True)

    numero_document: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    recue_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    materiau = relationship("Materiau")


# Déduction FIFO : réceptions d'un matériau, les plus anciennes d'abord.
Index("ix_reception_materiau_fifo", ReceptionMateriau.materiau_id, ReceptionMateriau.recue_le)
