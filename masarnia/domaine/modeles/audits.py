from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.modeles.base import DocumentJSON, ModeleHorodate, maintenant_utc


class ChecklistAudit(ModeleHorodate):
    __tablename__ = "checklist_audit"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    categorie: Mapped[str | None] = mapped_column(String(120), nullable=True)
    # Liste de libellés de points à contrôler.
    points: Mapped[list] = mapped_column(DocumentJSON, nullable=False, default=list)
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class EnregistrementAudit(ModeleHorodate):
    """Audit interne réalisé sur une checklist.

    `resultats` : liste de {"point", "conforme", "notes"} ; `score` en pourcentage entier.
    """

    __tablename__ = "enregistrement_audit"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    checklist_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("checklist_audit.id"), nullable=False)

    auditeur: Mapped[str] = mapped_column(String(200), nullable=False)
    resultats: Mapped[list] = mapped_column(DocumentJSON, nullable=False, default=list)
    score: Mapped[int] = mapped_column(nullable=False, default=0)

    constatations: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommandations: Mapped[str | None] = mapped_column(Text, nullable=True)

    date_audit: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=maintenant_utc)

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    checklist = relationship("ChecklistAudit")
