from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import (
    CategorieMatierePremiere,
    MethodeSalaison,
    PolitiqueStockInsuffisant,
    StatutLotSalaison,
    TypeSourceMatiere,
)
from masarnia.domaine.modeles.production import LigneMatiereLot
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import MatierePremiere
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.services.stock_fifo import DeducteurStockFIFO, ResultatDeduction


class ErreurSalaison(Exception):
    """Erreur générique de salaison."""


class DonneesInvalidesSalaison(ErreurSalaison):
    """Lot de salaison invalide (quantité, pourcentage, réception inconnue…)."""


class LotSalaisonIntrouvable(ErreurSalaison):
    """Lot de salaison introuvable."""


class TransitionStatutInterditeSalaison(ErreurSalaison):
    """Transition de statut invalide (ex: rouvrir un lot terminé)."""


@dataclass(frozen=True)
class LotSalaisonDisponible:
    lot: LotSalaison
    quantite_utilisee: float

    @property
    def quantite_disponible(self) -> float:
        return max(float(self.lot.quantite) - self.quantite_utilisee, 0.0)


def numero_lot_salaison_base(date_debut: date) -> str:
    """Numéro de base d'un lot de salaison : jour-mois (ex: 05-03)."""

    return date_debut.strftime("%d-%m")


class ServiceSalaison:
    """Lots de salaison : numérotation, déduction du sel nitrité, clôture.

    Règles :
    - la déduction de sel ne concerne que la méthode DRY
    - un lot COMPLETED ou CANCELLED n'est jamais rouvert
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        politique_stock: PolitiqueStockInsuffisant = PolitiqueStockInsuffisant.IGNORE,
        motif_sel_nitrite: str = "sól peklow",
        duree_defaut_jours: int = 7,
    ) -> None:
        self._session = session
        self._politique_stock = politique_stock
        self._motif_sel_nitrite = motif_sel_nitrite
        self._duree_defaut_jours = duree_defaut_jours
        self.derniere_deduction: ResultatDeduction | None = None

    async def creer_lot(
        self,
        *,
        nom_produit: str,
        quantite: float,
        date_debut: date,
        unite: str = "kg",
        methode: MethodeSalaison = MethodeSalaison.DRY,
        reception_id: UUID | None = None,
        description_viande: str | None = None,
        pourcentage_sel_nitrite: float | None = None,
        saumure_eau: float | None = None,
        saumure_sel: float | None = None,
        saumure_maggi: float | None = None,
        saumure_sucre: float | None = None,
        duree_prevue_jours: int | None = None,
        temperature: float | None = None,
        notes: str | None = None,
        utilisateur_id: UUID | None = None,
    ) -> LotSalaison:
        if quantite is None or float(quantite) <= 0:
            raise DonneesInvalidesSalaison("La quantité doit être > 0.")
        if pourcentage_sel_nitrite is not None and not (0 <= float(pourcentage_sel_nitrite) <= 100):
            raise DonneesInvalidesSalaison("Le pourcentage de sel doit être compris entre 0 et 100.")
        duree = self._duree_defaut_jours if duree_prevue_jours is None else int(duree_prevue_jours)
        if duree < 1:
            raise DonneesInvalidesSalaison("La durée prévue doit être d'au moins un jour.")

        async with self._session.begin():
            if reception_id is not None:
                if await self._session.get(ReceptionMatierePremiere, reception_id) is None:
                    raise DonneesInvalidesSalaison("Réception inconnue.")

            numero = await self._generer_numero_lot(date_debut)

            lot = LotSalaison(
                numero_lot=numero,
                reception_id=reception_id,
                nom_produit=nom_produit,
                quantite=float(quantite),
                unite=unite,
                methode=methode,
                description_viande=description_viande,
                pourcentage_sel_nitrite=pourcentage_sel_nitrite,
                saumure_eau=saumure_eau,
                saumure_sel=saumure_sel,
                saumure_maggi=saumure_maggi,
                saumure_sucre=saumure_sucre,
                date_debut=date_debut,
                date_fin_prevue=date_debut + timedelta(days=duree),
                temperature=temperature,
                notes=notes,
                statut=StatutLotSalaison.IN_PROGRESS,
                utilisateur_id=utilisateur_id,
            )
            self._session.add(lot)
            await self._session.flush()

            if methode == MethodeSalaison.DRY and pourcentage_sel_nitrite:
                sel_utilise = float(quantite) * float(pourcentage_sel_nitrite) / 100
                deducteur = DeducteurStockFIFO(self._session, politique=self._politique_stock)
                self.derniere_deduction = await deducteur.deduire(
                    motif_materiau=self._motif_sel_nitrite,
                    quantite=sel_utilise,
                )

            return lot

    async def terminer_lot(
        self,
        *,
        lot_id: UUID,
        date_fin_reelle: date | None = None,
        notes: str | None = None,
    ) -> LotSalaison:
        async with self._session.begin():
            lot = await self._charger_lot(lot_id)
            if lot.statut != StatutLotSalaison.IN_PROGRESS:
                raise TransitionStatutInterditeSalaison("Seul un lot en cours peut être terminé.")

            lot.statut = StatutLotSalaison.COMPLETED
            lot.date_fin_reelle = date_fin_reelle or date.today()
            if notes is not None:
                lot.notes = notes
            await self._session.flush()
            return lot

    async def annuler_lot(self, *, lot_id: UUID) -> LotSalaison:
        async with self._session.begin():
            lot = await self._charger_lot(lot_id)
            if lot.statut != StatutLotSalaison.IN_PROGRESS:
                raise TransitionStatutInterditeSalaison("Seul un lot en cours peut être annulé.")

            lot.statut = StatutLotSalaison.CANCELLED
            await self._session.flush()
            return lot

    async def lots_termines_disponibles(self) -> list[LotSalaisonDisponible]:
        """Lots terminés dont une partie n'a pas encore été consommée en production."""

        utilise = (
            select(
                LigneMatiereLot.lot_salaison_id.label("lot_salaison_id"),
                func.coalesce(func.sum(LigneMatiereLot.quantite), 0.0).label("quantite_utilisee"),
            )
            .where(LigneMatiereLot.type_source == TypeSourceMatiere.CURING_BATCH)
            .group_by(LigneMatiereLot.lot_salaison_id)
            .subquery()
        )

        res = await self._session.execute(
            select(LotSalaison, func.coalesce(utilise.c.quantite_utilisee, 0.0))
            .outerjoin(utilise, utilise.c.lot_salaison_id == LotSalaison.id)
            .where(LotSalaison.statut == StatutLotSalaison.COMPLETED)
            .order_by(LotSalaison.date_fin_reelle.desc())
        )

        disponibles = [
            LotSalaisonDisponible(lot=lot, quantite_utilisee=float(quantite_utilisee or 0.0))
            for lot, quantite_utilisee in res.all()
        ]
        return [d for d in disponibles if d.quantite_disponible > 0]

    async def viande_disponible(self, *, fenetre_jours: int = 14) -> list[ReceptionMatierePremiere]:
        """Réceptions de viande conformes des derniers jours, candidates à la salaison."""

        depuis = datetime.combine(date.today() - timedelta(days=fenetre_jours), time.min, tzinfo=timezone.utc)

        res = await self._session.execute(
            select(ReceptionMatierePremiere)
            .join(MatierePremiere, MatierePremiere.id == ReceptionMatierePremiere.matiere_premiere_id)
            .where(MatierePremiere.categorie == CategorieMatierePremiere.MEAT)
            .where(ReceptionMatierePremiere.conforme.is_(True))
            .where(ReceptionMatierePremiere.recue_le >= depuis)
            .order_by(ReceptionMatierePremiere.recue_le.desc())
        )
        return list(res.scalars().all())

    async def _charger_lot(self, lot_id: UUID) -> LotSalaison:
        lot = await self._session.get(LotSalaison, lot_id)
        if lot is None:
            raise LotSalaisonIntrouvable("Lot de salaison introuvable.")
        return lot

    async def _numero_existe(self, numero: str) -> bool:
        res = await self._session.execute(select(LotSalaison.id).where(LotSalaison.numero_lot == numero))
        return res.scalar_one_or_none() is not None

    async def _generer_numero_lot(self, date_debut: date) -> str:
        base = numero_lot_salaison_base(date_debut)
        if not await self._numero_existe(base):
            return base

        res = await self._session.execute(select(func.count(LotSalaison.id)))
        compteur = int(res.scalar_one()) + 1
        numero = f"{base}-{compteur}"
        while await self._numero_existe(numero):
            compteur += 1
            numero = f"{base}-{compteur}"
        return numero
