from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.modeles.hygiene import PointTemperature, ReleveTemperature
from masarnia.domaine.services.conformite import (
    EvaluateurConformite,
    ObservateurActionsCorrectives,
    ObservateurConformite,
    PolitiqueConformite,
)


class ErreurTemperature(Exception):
    """Erreur générique de suivi des températures."""


class PointTemperatureIntrouvable(ErreurTemperature):
    """Point de mesure introuvable."""


@dataclass(frozen=True)
class TendanceJournaliere:
    point_temperature_id: UUID
    nom_point: str
    jour: date
    moyenne: float
    minimum: float
    maximum: float
    nb_releves: int
    nb_non_conformes: int


class ServiceTemperatures:
    """Relevés de température : conformité figée à l'écriture + action corrective."""

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

    async def enregistrer_releve(
        self,
        *,
        point_temperature_id: UUID,
        temperature: float,
        notes: str | None = None,
        releve_le: datetime | None = None,
        utilisateur_id: UUID | None = None,
    ) -> ReleveTemperature:
        if releve_le is None:
            releve_le = datetime.now(timezone.utc)

        async with self._session.begin():
            point = await self._session.get(PointTemperature, point_temperature_id)
            if point is None:
                raise PointTemperatureIntrouvable("Point de mesure introuvable.")

            resultat = self._evaluateur.releve_temperature(
                point_id=point.id,
                nom_point=point.nom,
                temperature=temperature,
                minimum=point.temperature_min,
                maximum=point.temperature_max,
                utilisateur_id=utilisateur_id,
            )

            releve = ReleveTemperature(
                point_temperature_id=point.id,
                temperature=float(temperature),
                conforme=resultat.conforme,
                notes=notes,
                releve_le=releve_le,
                utilisateur_id=utilisateur_id,
            )
            self._session.add(releve)
            await self._session.flush()

            if resultat.constat is not None:
                await self._observateur.signaler(resultat.constat)

            return releve

    async def tendances(
        self,
        *,
        jours: int = 7,
        point_temperature_id: UUID | None = None,
    ) -> list[TendanceJournaliere]:
        """Moyenne / min / max par point et par jour sur la période."""

        depuis = datetime.now(timezone.utc) - timedelta(days=jours)

        stmt = (
            select(ReleveTemperature, PointTemperature.nom)
            .join(PointTemperature, PointTemperature.id == ReleveTemperature.point_temperature_id)
            .where(ReleveTemperature.releve_le >= depuis)
            .order_by(ReleveTemperature.releve_le.asc())
        )
        if point_temperature_id is not None:
            stmt = stmt.where(ReleveTemperature.point_temperature_id == point_temperature_id)

        res = await self._session.execute(stmt)

        groupes: dict[tuple[UUID, str, date], list[ReleveTemperature]] = defaultdict(list)
        for releve, nom_point in res.all():
            groupes[(releve.point_temperature_id, nom_point, releve.releve_le.date())].append(releve)

        tendances: list[TendanceJournaliere] = []
        for (point_id, nom_point, jour), releves in groupes.items():
            valeurs = [r.temperature for r in releves]
            tendances.append(
                TendanceJournaliere(
                    point_temperature_id=point_id,
                    nom_point=nom_point,
                    jour=jour,
                    moyenne=round(sum(valeurs) / len(valeurs), 2),
                    minimum=min(valeurs),
                    maximum=max(valeurs),
                    nb_releves=len(valeurs),
                    nb_non_conformes=sum(1 for r in releves if not r.conforme),
                )
            )

        tendances.sort(key=lambda t: (t.nom_point, t.jour))
        return tendances
