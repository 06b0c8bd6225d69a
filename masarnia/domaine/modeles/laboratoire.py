from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.modeles.base import ModeleHorodate


class TypeAnalyseLabo(ModeleHorodate):
    __tablename__ = "type_analyse_labo"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    categorie: Mapped[str] = mapped_column(String(120), nullable=False)
    unite: Mapped[str | None] = mapped_column(String(50), nullable=True)
    norme_min: Mapped[float | None] = mapped_column(nullable=True)
    norme_max: Mapped[float | None] = mapped_column(nullable=True)
    norme_texte: Mapped[str | None] = mapped_column(String(300), nullable=True)
    frequence: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AnalyseLabo(ModeleHorodate):
    """Analyse de laboratoire. `conforme` à None : résultat en attente."""

    __tablename__ = "analyse_labo"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    type_analyse_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("type_analyse_labo.id"), nullable=False)

    date_prelevement: Mapped[date] = mapped_column(Date, nullable=False)
    date_resultat: Mapped[date | None] = mapped_column(Date, nullable=True)
    origine_echantillon: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lot_echantillon: Mapped[str | None] = mapped_column(String(120), nullable=True)

    resultat: Mapped[str | None] = mapped_column(String(300), nullable=True)
    valeur_resultat: Mapped[float | None] = mapped_column(nullable=True)
    conforme: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    laboratoire: Mapped[str | None] = mapped_column(String(200), nullable=True)
    numero_document: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    type_analyse = relationship("TypeAnalyseLabo")
