from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.modeles.audits import ChecklistAudit, EnregistrementAudit
from masarnia.domaine.services.conformite import (
    EvaluateurConformite,
    ObservateurActionsCorrectives,
    ObservateurConformite,
    PolitiqueConformite,
    calculer_score_audit,
    normaliser_resultats_audit,
)


class ErreurAudit(Exception):
    """Erreur générique d'audit interne."""


class DonneesInvalidesAudit(ErreurAudit):
    """Audit invalide (checklist inconnue, auditeur manquant…)."""


class EnregistrementAuditIntrouvable(ErreurAudit):
    """Enregistrement d'audit introuvable."""


def _score_retenu(resultats: list[dict[str, Any]], score_fourni: int | None) -> int:
    # Les résultats font foi ; le score saisi ne sert qu'en l'absence de résultats.
    if resultats:
        return calculer_score_audit(resultats)
    return int(score_fourni or 0)


class ServiceAudits:
    """Audits internes : score calculé + action corrective sous le seuil."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        politique: PolitiqueConformite | None = None,
        observateur: ObservateurConformite | None = None,
    ) -> None:
        self._session = session
        self._evaluateur = EvaluateurConformite(politique)
        self._observateur = observateur or ObservateurActionsCorrectives(session)

    async def enregistrer_audit(
        self,
        *,
        checklist_id: UUID,
        auditeur: str,
        resultats: Any = None,
        score_fourni: int | None = None,
        constatations: str | None = None,
        recommandations: str | None = None,
        date_audit: datetime | None = None,
        utilisateur_id: UUID | None = None,
    ) -> EnregistrementAudit:
        if not auditeur or not auditeur.strip():
            raise DonneesInvalidesAudit("L'auditeur est obligatoire.")
        if date_audit is None:
            date_audit = datetime.now(timezone.utc)

        lignes = normaliser_resultats_audit(resultats)
        score = _score_retenu(lignes, score_fourni)

        async with self._session.begin():
            checklist = await self._session.get(ChecklistAudit, checklist_id)
            if checklist is None:
                raise DonneesInvalidesAudit("Checklist inconnue.")

            enregistrement = EnregistrementAudit(
                checklist_id=checklist.id,
                auditeur=auditeur.strip(),
                resultats=lignes,
                score=score,
                constatations=constatations,
                recommandations=recommandations,
                date_audit=date_audit,
                utilisateur_id=utilisateur_id,
            )
            self._session.add(enregistrement)
            await self._session.flush()

            resultat = self._evaluateur.audit(
                enregistrement_id=enregistrement.id,
                nom_checklist=checklist.nom,
                score=score,
                utilisateur_id=utilisateur_id,
            )
            if resultat.constat is not None:
                await self._observateur.signaler(resultat.constat)

            return enregistrement

    async def modifier_audit(
        self,
        *,
        enregistrement_id: UUID,
        auditeur: str | None = None,
        resultats: Any = None,
        score_fourni: int | None = None,
        constatations: str | None = None,
        recommandations: str | None = None,
        date_audit: datetime | None = None,
    ) -> EnregistrementAudit:
        """Recalcule le score ; les actions correctives existantes restent telles quelles."""

        async with self._session.begin():
            enregistrement = await self._session.get(EnregistrementAudit, enregistrement_id)
            if enregistrement is None:
                raise EnregistrementAuditIntrouvable("Enregistrement d'audit introuvable.")

            if auditeur is not None:
                if not auditeur.strip():
                    raise DonneesInvalidesAudit("L'auditeur est obligatoire.")
                enregistrement.auditeur = auditeur.strip()
            if resultats is not None:
                lignes = normaliser_resultats_audit(resultats)
                enregistrement.resultats = lignes
                enregistrement.score = _score_retenu(lignes, score_fourni)
            elif score_fourni is not None and not enregistrement.resultats:
                enregistrement.score = int(score_fourni)
            if constatations is not None:
                enregistrement.constatations = constatations
            if recommandations is not None:
                enregistrement.recommandations = recommandations
            if date_audit is not None:
                enregistrement.date_audit = date_audit

            await self._session.flush()
            return enregistrement
