from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Date, Enum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from masarnia.domaine.enums.types import CategorieDocument
from masarnia.domaine.modeles.base import ModeleHorodate


class Document(ModeleHorodate):
    """Métadonnées d'un document du système qualité (le fichier reste hors base)."""

    __tablename__ = "document"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    titre: Mapped[str] = mapped_column(String(300), nullable=False)
    categorie: Mapped[CategorieDocument] = mapped_column(
        Enum(CategorieDocument, native_enum=False, length=50),
        nullable=False,
    )
    nom_fichier: Mapped[str | None] = mapped_column(String(300), nullable=True)
    chemin_fichier: Mapped[str | None] = mapped_column(String(500), nullable=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0")

    valide_du: Mapped[date | None] = mapped_column(Date, nullable=True)
    valide_au: Mapped[date | None] = mapped_column(Date, nullable=True)

    depose_par_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)
