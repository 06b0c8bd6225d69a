from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.modeles.base import ModeleHorodate


class TypeDechet(ModeleHorodate):
    """Type de déchet (sous-produits animaux catégorie 1/2/3, emballages...)."""

    __tablename__ = "type_dechet"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    categorie: Mapped[str] = mapped_column(String(120), nullable=False)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class CollecteurDechets(ModeleHorodate):
    __tablename__ = "collecteur_dechets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    adresse: Mapped[str | None] = mapped_column(String(300), nullable=True)
    telephone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    numero_veterinaire: Mapped[str | None] = mapped_column(String(50), nullable=True)
    numero_contrat: Mapped[str | None] = mapped_column(String(120), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(200), nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class EnregistrementDechet(ModeleHorodate):
    __tablename__ = "enregistrement_dechet"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    type_dechet_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("type_dechet.id"), nullable=False)
    collecteur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("collecteur_dechets.id"), nullable=True)

    quantite: Mapped[float] = mapped_column(nullable=False)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")
    date_collecte: Mapped[date] = mapped_column(Date, nullable=False)

    numero_document: Mapped[str | None] = mapped_column(String(120), nullable=True)
    vehicule: Mapped[str | None] = mapped_column(String(120), nullable=True)
    chauffeur: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    type_dechet = relationship("TypeDechet")
    collecteur = relationship("CollecteurDechets")
