from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import StatutControleNuisibles
from masarnia.domaine.modeles.hygiene import ControleNuisibles, PointNuisibles
from masarnia.domaine.services.conformite import (
    EvaluateurConformite,
    ObservateurActionsCorrectives,
    ObservateurConformite,
    PolitiqueConformite,
)


class ErreurNuisibles(Exception):
    """Erreur générique de lutte contre les nuisibles."""


class PointNuisiblesIntrouvable(ErreurNuisibles):
    """Point de contrôle introuvable."""


class ServiceNuisibles:
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

    async def enregistrer_controle(
        self,
        *,
        point_nuisibles_id: UUID,
        statut: StatutControleNuisibles,
        constatations: str | None = None,
        action_menee: str | None = None,
        controle_le: datetime | None = None,
        utilisateur_id: UUID | None = None,
    ) -> ControleNuisibles:
        if controle_le is None:
            controle_le = datetime.now(timezone.utc)

        async with self._session.begin():
            point = await self._session.get(PointNuisibles, point_nuisibles_id)
            if point is None:
                raise PointNuisiblesIntrouvable("Point de contrôle introuvable.")

            controle = ControleNuisibles(
                point_nuisibles_id=point.id,
                statut=statut,
                constatations=constatations,
                action_menee=action_menee,
                controle_le=controle_le,
                utilisateur_id=utilisateur_id,
            )
            self._session.add(controle)
            await self._session.flush()

            resultat = self._evaluateur.controle_nuisibles(
                point_id=point.id,
                nom_point=point.nom,
                statut=statut,
                constatations=constatations,
                utilisateur_id=utilisateur_id,
            )
            if resultat.constat is not None:
                await self._observateur.signaler(resultat.constat)

            return controle
