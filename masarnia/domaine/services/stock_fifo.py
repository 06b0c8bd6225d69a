from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import PolitiqueStockInsuffisant
from masarnia.domaine.modeles.receptions import ReceptionMateriau
from masarnia.domaine.modeles.referentiel import Materiau


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prelevement:
    reception_materiau_id: UUID
    quantite: float


@dataclass(frozen=True)
class ResultatDeduction:
    quantite_demandee: float
    materiau_id: UUID | None = None
    prelevements: list[Prelevement] = field(default_factory=list)

    @property
    def quantite_deduite(self) -> float:
        return float(sum(p.quantite for p in self.prelevements))

    @property
    def complete(self) -> bool:
        return self.quantite_deduite >= self.quantite_demandee


class ErreurDeductionStock(Exception):
    """Erreur générique de déduction de stock."""


class StockInsuffisant(ErreurDeductionStock):
    """Le stock disponible ne permet pas de satisfaire la demande."""


class DeducteurStockFIFO:
    """Déduction FIFO (First In, First Out) sur les réceptions d'un matériau.

    - Réceptions triées par date de réception, la plus ancienne d'abord
    - Chaque décrément est un UPDATE conditionnel (compare-and-decrement) :
      deux déductions concurrentes ne peuvent pas perdre de mise à jour
    - Doit être appelé dans une transaction déjà ouverte
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        politique: PolitiqueStockInsuffisant = PolitiqueStockInsuffisant.IGNORE,
    ) -> None:
        self._session = session
        self._politique = politique

    async def deduire(self, *, motif_materiau: str, quantite: float) -> ResultatDeduction:
        besoin = float(quantite)
        if besoin <= 0:
            return ResultatDeduction(quantite_demandee=besoin)

        materiau = await self._trouver_materiau(motif_materiau)
        if materiau is None:
            if self._politique in (PolitiqueStockInsuffisant.REJECT, PolitiqueStockInsuffisant.PARTIAL_FIFO):
                raise StockInsuffisant(f"Aucun matériau correspondant à « {motif_materiau} ».")
            logger.warning("deduction_fifo_materiau_absent motif=%s besoin=%s", motif_materiau, besoin)
            return ResultatDeduction(quantite_demandee=besoin)

        if self._politique == PolitiqueStockInsuffisant.PARTIAL_FIFO:
            prelevements = await self._deduire_reparti(materiau.id, besoin)
        else:
            prelevements = await self._deduire_reception_unique(materiau.id, besoin)

        if prelevements:
            await self._session.execute(
                update(Materiau)
                .where(Materiau.id == materiau.id)
                .values(stock_actuel=Materiau.stock_actuel - besoin)
            )

        resultat = ResultatDeduction(quantite_demandee=besoin, materiau_id=materiau.id, prelevements=prelevements)
        logger.info(
            "deduction_fifo materiau_id=%s besoin=%s deduit=%s politique=%s",
            materiau.id,
            besoin,
            resultat.quantite_deduite,
            self._politique.value,
        )
        return resultat

    async def _trouver_materiau(self, motif: str) -> Materiau | None:
        res = await self._session.execute(
            select(Materiau)
            .where(func.lower(Materiau.nom).contains(motif.lower()))
            .order_by(Materiau.nom.asc())
            .limit(1)
        )
        return res.scalar_one_or_none()

    async def _deduire_reception_unique(self, materiau_id: UUID, besoin: float) -> list[Prelevement]:
        """Une seule réception, la plus ancienne dont le solde dépasse strictement le besoin."""

        res = await self._session.execute(
            select(ReceptionMateriau.id)
            .where(ReceptionMateriau.materiau_id == materiau_id)
            .where(ReceptionMateriau.quantite > besoin)
            .order_by(ReceptionMateriau.recue_le.asc(), ReceptionMateriau.id.asc())
        )
        for (reception_id,) in res.all():
            maj = await self._session.execute(
                update(ReceptionMateriau)
                .where(ReceptionMateriau.id == reception_id)
                .where(ReceptionMateriau.quantite > besoin)
                .values(quantite=ReceptionMateriau.quantite - besoin)
            )
            if maj.rowcount == 1:
                return [Prelevement(reception_materiau_id=reception_id, quantite=besoin)]

        if self._politique == PolitiqueStockInsuffisant.ALLOW_NEGATIVE:
            return await self._deduire_en_negatif(materiau_id, besoin)

        if self._politique == PolitiqueStockInsuffisant.REJECT:
            raise StockInsuffisant("Aucune réception ne couvre la quantité de sel nitrité nécessaire.")

        logger.warning("deduction_fifo_stock_insuffisant materiau_id=%s besoin=%s", materiau_id, besoin)
        return []

    async def _deduire_reparti(self, materiau_id: UUID, besoin: float) -> list[Prelevement]:
        res = await self._session.execute(
            select(ReceptionMateriau.id, ReceptionMateriau.quantite)
            .where(ReceptionMateriau.materiau_id == materiau_id)
            .where(ReceptionMateriau.quantite > 0)
            .order_by(ReceptionMateriau.recue_le.asc(), ReceptionMateriau.id.asc())
        )
        candidats = [(rid, float(q)) for rid, q in res.all()]

        if sum(q for _, q in candidats) < besoin:
            raise StockInsuffisant("Stock total de sel nitrité insuffisant.")

        reste = besoin
        prelevements: list[Prelevement] = []
        for reception_id, disponible in candidats:
            if reste <= 0:
                break
            prise = min(disponible, reste)
            maj = await self._session.execute(
                update(ReceptionMateriau)
                .where(ReceptionMateriau.id == reception_id)
                .where(ReceptionMateriau.quantite >= prise)
                .values(quantite=ReceptionMateriau.quantite - prise)
            )
            if maj.rowcount != 1:
                # Solde modifié entre la lecture et l'écriture : la transaction appelante est annulée.
                raise StockInsuffisant("Stock de sel nitrité modifié pendant la déduction.")
            prelevements.append(Prelevement(reception_materiau_id=reception_id, quantite=prise))
            reste -= prise

        return prelevements

    async def _deduire_en_negatif(self, materiau_id: UUID, besoin: float) -> list[Prelevement]:
        res = await self._session.execute(
            select(ReceptionMateriau.id)
            .where(ReceptionMateriau.materiau_id == materiau_id)
            .order_by(ReceptionMateriau.recue_le.asc(), ReceptionMateriau.id.asc())
            .limit(1)
        )
        reception_id = res.scalar_one_or_none()
        if reception_id is None:
            logger.warning("deduction_fifo_aucune_reception materiau_id=%s besoin=%s", materiau_id, besoin)
            return []

        await self._session.execute(
            update(ReceptionMateriau)
            .where(ReceptionMateriau.id == reception_id)
            .values(quantite=ReceptionMateriau.quantite - besoin)
        )
        return [Prelevement(reception_materiau_id=reception_id, quantite=besoin)]
