from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from masarnia.domaine.modeles.base import BaseModele, DocumentJSON, maintenant_utc


class JournalAudit(BaseModele):
    """Journal d'audit technique (append-only).

    Aucune route ne modifie ni ne supprime ces lignes.
    """

    __tablename__ = "journal_audit"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Nullable pour les appels anonymes (login, register).
    utilisateur_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("utilisateur.id", ondelete="SET NULL"), nullable=True, index=True
    )

    cree_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    action: Mapped[str] = mapped_column(String(120), nullable=False)
    ressource: Mapped[str] = mapped_column(String(120), nullable=False)

    methode_http: Mapped[str | None] = mapped_column(String(20), nullable=True)
    chemin: Mapped[str | None] = mapped_column(String(300), nullable=True)
    statut_http: Mapped[int | None] = mapped_column(nullable=True)

    donnees: Mapped[dict | None] = mapped_column(DocumentJSON, nullable=True)

    ip: Mapped[str | None] = mapped_column(String(60), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
