from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.enums.types import CategorieMatierePremiere
from masarnia.domaine.modeles.base import ModeleHorodate


class Fournisseur(ModeleHorodate):
    __tablename__ = "fournisseur"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    adresse: Mapped[str | None] = mapped_column(String(300), nullable=True)
    telephone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    numero_veterinaire: Mapped[str | None] = mapped_column(String(50), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(200), nullable=True)

    agree: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class MatierePremiere(ModeleHorodate):
    """Surowiec : viande, épices, additifs ou emballages réceptionnés."""

    __tablename__ = "matiere_premiere"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    categorie: Mapped[CategorieMatierePremiere] = mapped_column(
        Enum(CategorieMatierePremiere, native_enum=False, length=50),
        nullable=False,
    )
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")

    fournisseur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("fournisseur.id"), nullable=True)

    conditions_stockage: Mapped[str | None] = mapped_column(String(300), nullable=True)
    duree_conservation_jours: Mapped[int | None] = mapped_column(nullable=True)
    allergenes: Mapped[str | None] = mapped_column(String(300), nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    fournisseur = relationship("Fournisseur")


class Materiau(ModeleHorodate):
    """Matériau tenu en stock (sel nitrité, épices, boyaux, emballages).

    `stock_actuel` suit la somme des réceptions moins les consommations.
    """

    __tablename__ = "materiau"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    categorie: Mapped[str] = mapped_column(String(50), nullable=False, default="OTHER")
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")

    fournisseur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("fournisseur.id"), nullable=True)

    stock_minimum: Mapped[float | None] = mapped_column(nullable=True)
    stock_actuel: Mapped[float] = mapped_column(nullable=False, default=0.0)

    conditions_stockage: Mapped[str | None] = mapped_column(String(300), nullable=True)
    allergenes: Mapped[str | None] = mapped_column(String(300), nullable=True)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Produit(ModeleHorodate):
    """Produit fini (saucisse, jambon fumé...)."""

    __tablename__ = "produit"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    categorie: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")

    duree_conservation_jours: Mapped[int] = mapped_column(nullable=False, default=7)
    temperature_stockage: Mapped[str | None] = mapped_column(String(50), nullable=True)
    allergenes: Mapped[str | None] = mapped_column(String(300), nullable=True)

    # Température à cœur exigée en fin de cuisson. None : défaut de configuration (72°C).
    temperature_requise: Mapped[float | None] = mapped_column(nullable=True)

    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ParametresEntreprise(ModeleHorodate):
    """Ligne unique : en-têtes des rapports et des étiquettes."""

    __tablename__ = "parametres_entreprise"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom_entreprise: Mapped[str] = mapped_column(String(200), nullable=False, default="Masarnia")
    adresse: Mapped[str | None] = mapped_column(String(300), nullable=True)
    numero_veterinaire: Mapped[str | None] = mapped_column(String(50), nullable=True)
    telephone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    largeur_etiquette_mm: Mapped[int] = mapped_column(nullable=False, default=60)
    hauteur_etiquette_mm: Mapped[int] = mapped_column(nullable=False, default=40)
