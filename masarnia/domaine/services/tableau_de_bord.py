from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import PrioriteActionCorrective, StatutActionCorrective, StatutLotSalaison
from masarnia.domaine.modeles.audits import ChecklistAudit
from masarnia.domaine.modeles.haccp import ActionCorrective
from masarnia.domaine.modeles.hygiene import PointTemperature, ReleveTemperature
from masarnia.domaine.modeles.referentiel import Fournisseur, Materiau, Produit
from masarnia.domaine.modeles.salaison import LotSalaison


ACTIONS_EN_COURS = (StatutActionCorrective.OPEN, StatutActionCorrective.IN_PROGRESS)


@dataclass(frozen=True)
class StatistiquesTableauDeBord:
    produits_actifs: int
    fournisseurs_agrees: int
    releves_du_jour: int
    releves_non_conformes_7j: int
    actions_en_cours: int
    checklists_actives: int


@dataclass(frozen=True)
class Alerte:
    identifiant: str
    type_alerte: str
    gravite: str
    message: str
    moment: datetime


@dataclass(frozen=True)
class PointGraphique:
    jour: date
    moyenne: float


def _naif_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


class ServiceTableauDeBord:
    """Indicateurs d'accueil : compteurs, alertes, courbe des températures."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def statistiques(self) -> StatistiquesTableauDeBord:
        aujourd_hui = datetime.combine(date.today(), time.min, tzinfo=timezone.utc)
        il_y_a_7j = datetime.now(timezone.utc) - timedelta(days=7)

        async def compter(stmt) -> int:
            return int((await self._session.execute(stmt)).scalar_one())

        return StatistiquesTableauDeBord(
            produits_actifs=await compter(select(func.count(Produit.id)).where(Produit.actif.is_(True))),
            fournisseurs_agrees=await compter(
                select(func.count(Fournisseur.id)).where(Fournisseur.agree.is_(True))
            ),
            releves_du_jour=await compter(
                select(func.count(ReleveTemperature.id)).where(ReleveTemperature.releve_le >= aujourd_hui)
            ),
            releves_non_conformes_7j=await compter(
                select(func.count(ReleveTemperature.id))
                .where(ReleveTemperature.releve_le >= il_y_a_7j)
                .where(ReleveTemperature.conforme.is_(False))
            ),
            actions_en_cours=await compter(
                select(func.count(ActionCorrective.id)).where(ActionCorrective.statut.in_(ACTIONS_EN_COURS))
            ),
            checklists_actives=await compter(
                select(func.count(ChecklistAudit.id)).where(ChecklistAudit.actif.is_(True))
            ),
        )

    async def alertes(self, *, limite: int = 10) -> list[Alerte]:
        """Relevés hors plage (7 jours), actions ouvertes, stocks bas, salaisons échues."""

        alertes: list[Alerte] = []
        il_y_a_7j = datetime.now(timezone.utc) - timedelta(days=7)

        res = await self._session.execute(
            select(ReleveTemperature, PointTemperature.nom)
            .join(PointTemperature, PointTemperature.id == ReleveTemperature.point_temperature_id)
            .where(ReleveTemperature.conforme.is_(False))
            .where(ReleveTemperature.releve_le >= il_y_a_7j)
            .order_by(ReleveTemperature.releve_le.desc())
            .limit(5)
        )
        for releve, nom_point in res.all():
            alertes.append(
                Alerte(
                    identifiant=f"temp-{releve.id}",
                    type_alerte="TEMPERATURE",
                    gravite=PrioriteActionCorrective.HIGH.value,
                    message=f"Température hors plage à {nom_point} : {releve.temperature:g}°C",
                    moment=_naif_utc(releve.releve_le),
                )
            )

        res = await self._session.execute(
            select(ActionCorrective)
            .where(ActionCorrective.statut.in_(ACTIONS_EN_COURS))
            .order_by(ActionCorrective.cree_le.desc())
            .limit(5)
        )
        for action in res.scalars().all():
            alertes.append(
                Alerte(
                    identifiant=f"action-{action.id}",
                    type_alerte="CORRECTIVE_ACTION",
                    gravite=action.priorite.value,
                    message=f"Action corrective : {action.titre}",
                    moment=_naif_utc(action.cree_le),
                )
            )

        res = await self._session.execute(
            select(Materiau)
            .where(Materiau.actif.is_(True))
            .where(Materiau.stock_minimum.is_not(None))
            .where(Materiau.stock_actuel < Materiau.stock_minimum)
        )
        maintenant = _naif_utc(datetime.now(timezone.utc))
        for materiau in res.scalars().all():
            alertes.append(
                Alerte(
                    identifiant=f"stock-{materiau.id}",
                    type_alerte="LOW_STOCK",
                    gravite=PrioriteActionCorrective.MEDIUM.value,
                    message=f"Stock bas : {materiau.nom} ({materiau.stock_actuel:g} {materiau.unite})",
                    moment=maintenant,
                )
            )

        res = await self._session.execute(
            select(LotSalaison)
            .where(LotSalaison.statut == StatutLotSalaison.IN_PROGRESS)
            .where(LotSalaison.date_fin_prevue < date.today())
        )
        for lot in res.scalars().all():
            alertes.append(
                Alerte(
                    identifiant=f"salaison-{lot.id}",
                    type_alerte="CURING_OVERDUE",
                    gravite=PrioriteActionCorrective.MEDIUM.value,
                    message=f"Salaison {lot.numero_lot} à terminer (prévue le {lot.date_fin_prevue:%d.%m.%Y})",
                    moment=datetime.combine(lot.date_fin_prevue, time.min),
                )
            )

        alertes.sort(key=lambda a: a.moment, reverse=True)
        return alertes[:limite]

    async def graphique_temperatures(self, *, jours: int = 7) -> dict[str, list[PointGraphique]]:
        """Moyenne journalière par point de mesure."""

        depuis = datetime.now(timezone.utc) - timedelta(days=jours)
        res = await self._session.execute(
            select(ReleveTemperature.releve_le, ReleveTemperature.temperature, PointTemperature.nom)
            .join(PointTemperature, PointTemperature.id == ReleveTemperature.point_temperature_id)
            .where(ReleveTemperature.releve_le >= depuis)
            .order_by(ReleveTemperature.releve_le.asc())
        )

        valeurs: dict[str, dict[date, list[float]]] = defaultdict(lambda: defaultdict(list))
        for releve_le, temperature, nom_point in res.all():
            valeurs[nom_point][releve_le.date()].append(float(temperature))

        return {
            nom_point: [
                PointGraphique(jour=jour, moyenne=round(sum(t) / len(t), 2)) for jour, t in sorted(par_jour.items())
            ]
            for nom_point, par_jour in valeurs.items()
        }
