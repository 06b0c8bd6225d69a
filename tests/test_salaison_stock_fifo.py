from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import MethodeSalaison, PolitiqueStockInsuffisant, StatutLotSalaison
from masarnia.domaine.modeles.receptions import ReceptionMateriau
from masarnia.domaine.modeles.referentiel import Materiau
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.services.salaison import (
    DonneesInvalidesSalaison,
    ServiceSalaison,
    TransitionStatutInterditeSalaison,
)
from masarnia.domaine.services.stock_fifo import StockInsuffisant


async def _sel_nitrite(session: AsyncSession, *soldes: float) -> tuple[Materiau, list[ReceptionMateriau]]:
    """Matériau « Sól peklowa » et une réception par solde, de la plus ancienne à la plus récente."""

    materiau = Materiau(nom="Sól peklowa", categorie="ADDITIVES", unite="kg", stock_actuel=sum(soldes))
    session.add(materiau)
    await session.flush()

    receptions = [
        ReceptionMateriau(
            materiau_id=materiau.id,
            numero_lot=f"SP-{i + 1}",
            quantite=solde,
            recue_le=datetime(2024, 1 + i, 1, 8, 0, tzinfo=timezone.utc),
        )
        for i, solde in enumerate(soldes)
    ]
    session.add_all(receptions)
    await session.commit()
    return materiau, receptions


async def _solde(session: AsyncSession, reception_id: UUID) -> float:
    res = await session.execute(select(ReceptionMateriau.quantite).where(ReceptionMateriau.id == reception_id))
    return float(res.scalar_one())


async def _stock(session: AsyncSession, materiau_id: UUID) -> float:
    res = await session.execute(select(Materiau.stock_actuel).where(Materiau.id == materiau_id))
    return float(res.scalar_one())


async def _nb_lots(session: AsyncSession) -> int:
    return int((await session.execute(select(func.count(LotSalaison.id)))).scalar_one())


async def _creer_lot_sec(service: ServiceSalaison, *, quantite: float = 25.0, pourcentage: float = 2.0) -> LotSalaison:
    # 25 kg à 2 % : 0,5 kg de sel nitrité
    return await service.creer_lot(
        nom_produit="Szynka",
        quantite=quantite,
        date_debut=date(2024, 3, 5),
        methode=MethodeSalaison.DRY,
        pourcentage_sel_nitrite=pourcentage,
    )


@pytest.mark.asyncio
async def test_deduction_sur_la_plus_ancienne_reception_suffisante(session_test: AsyncSession) -> None:
    materiau, (petite, grande) = await _sel_nitrite(session_test, 0.3, 1.0)
    service = ServiceSalaison(session_test)

    lot = await _creer_lot_sec(service)

    assert lot.numero_lot == "05-03"
    assert lot.date_fin_prevue == date(2024, 3, 12)
    assert service.derniere_deduction is not None
    assert service.derniere_deduction.complete
    assert await _solde(session_test, petite.id) == pytest.approx(0.3)
    assert await _solde(session_test, grande.id) == pytest.approx(0.5)
    assert await _stock(session_test, materiau.id) == pytest.approx(0.8)


@pytest.mark.asyncio
async def test_stock_insuffisant_ignore_le_lot_est_cree(session_test: AsyncSession) -> None:
    materiau, (reception,) = await _sel_nitrite(session_test, 0.3)
    service = ServiceSalaison(session_test, politique_stock=PolitiqueStockInsuffisant.IGNORE)

    lot = await _creer_lot_sec(service)

    assert lot.statut == StatutLotSalaison.IN_PROGRESS
    assert service.derniere_deduction is not None
    assert service.derniere_deduction.prelevements == []
    assert await _solde(session_test, reception.id) == pytest.approx(0.3)
    assert await _stock(session_test, materiau.id) == pytest.approx(0.3)


@pytest.mark.asyncio
async def test_solde_egal_au_besoin_ne_suffit_pas(session_test: AsyncSession) -> None:
    _materiau, (reception,) = await _sel_nitrite(session_test, 0.5)
    service = ServiceSalaison(session_test)

    await _creer_lot_sec(service)

    assert await _solde(session_test, reception.id) == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_stock_insuffisant_reject_annule_le_lot(session_test: AsyncSession) -> None:
    materiau, (reception,) = await _sel_nitrite(session_test, 0.3)
    service = ServiceSalaison(session_test, politique_stock=PolitiqueStockInsuffisant.REJECT)
    # le rollback expire les objets de la session
    materiau_id, reception_id = materiau.id, reception.id

    with pytest.raises(StockInsuffisant):
        await _creer_lot_sec(service)

    assert await _nb_lots(session_test) == 0
    assert await _solde(session_test, reception_id) == pytest.approx(0.3)
    assert await _stock(session_test, materiau_id) == pytest.approx(0.3)


@pytest.mark.asyncio
async def test_stock_insuffisant_partial_fifo(session_test: AsyncSession) -> None:
    materiau, (ancienne, recente) = await _sel_nitrite(session_test, 0.3, 0.4)
    service = ServiceSalaison(session_test, politique_stock=PolitiqueStockInsuffisant.PARTIAL_FIFO)

    await _creer_lot_sec(service)

    assert service.derniere_deduction is not None
    assert [p.reception_materiau_id for p in service.derniere_deduction.prelevements] == [ancienne.id, recente.id]
    assert await _solde(session_test, ancienne.id) == pytest.approx(0.0)
    assert await _solde(session_test, recente.id) == pytest.approx(0.2)
    assert await _stock(session_test, materiau.id) == pytest.approx(0.2)


@pytest.mark.asyncio
async def test_partial_fifo_total_insuffisant(session_test: AsyncSession) -> None:
    _materiau, _receptions = await _sel_nitrite(session_test, 0.1, 0.2)
    service = ServiceSalaison(session_test, politique_stock=PolitiqueStockInsuffisant.PARTIAL_FIFO)

    with pytest.raises(StockInsuffisant):
        await _creer_lot_sec(service)
    assert await _nb_lots(session_test) == 0


@pytest.mark.asyncio
async def test_stock_insuffisant_allow_negative(session_test: AsyncSession) -> None:
    _materiau, (ancienne, recente) = await _sel_nitrite(session_test, 0.3, 0.1)
    service = ServiceSalaison(session_test, politique_stock=PolitiqueStockInsuffisant.ALLOW_NEGATIVE)

    await _creer_lot_sec(service)

    assert await _solde(session_test, ancienne.id) == pytest.approx(-0.2)
    assert await _solde(session_test, recente.id) == pytest.approx(0.1)


@pytest.mark.asyncio
async def test_injection_ne_deduit_pas_de_sel(session_test: AsyncSession) -> None:
    _materiau, (reception,) = await _sel_nitrite(session_test, 1.0)
    service = ServiceSalaison(session_test)

    await service.creer_lot(
        nom_produit="Boczek",
        quantite=25.0,
        date_debut=date(2024, 3, 5),
        methode=MethodeSalaison.INJECTION,
        pourcentage_sel_nitrite=2.0,
        saumure_eau=10.0,
        saumure_sel=1.2,
    )

    assert service.derniere_deduction is None
    assert await _solde(session_test, reception.id) == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_numerotation_meme_jour(session_test: AsyncSession) -> None:
    service = ServiceSalaison(session_test)

    premier = await service.creer_lot(
        nom_produit="Szynka", quantite=10.0, date_debut=date(2024, 3, 5), methode=MethodeSalaison.INJECTION
    )
    second = await service.creer_lot(
        nom_produit="Boczek", quantite=10.0, date_debut=date(2024, 3, 5), methode=MethodeSalaison.INJECTION
    )
    autre_jour = await service.creer_lot(
        nom_produit="Schab", quantite=10.0, date_debut=date(2024, 3, 6), methode=MethodeSalaison.INJECTION
    )

    assert premier.numero_lot == "05-03"
    assert second.numero_lot == "05-03-2"
    assert autre_jour.numero_lot == "06-03"


@pytest.mark.asyncio
async def test_cycle_de_vie_salaison(session_test: AsyncSession) -> None:
    service = ServiceSalaison(session_test)
    lot = await service.creer_lot(
        nom_produit="Szynka", quantite=10.0, date_debut=date(2024, 3, 5), methode=MethodeSalaison.INJECTION
    )

    lot_id = lot.id

    termine = await service.terminer_lot(lot_id=lot_id, date_fin_reelle=date(2024, 3, 11))
    assert termine.statut == StatutLotSalaison.COMPLETED
    assert termine.date_fin_reelle == date(2024, 3, 11)

    with pytest.raises(TransitionStatutInterditeSalaison):
        await service.annuler_lot(lot_id=lot_id)
    with pytest.raises(TransitionStatutInterditeSalaison):
        await service.terminer_lot(lot_id=lot_id)

    disponibles = await service.lots_termines_disponibles()
    assert [d.lot.id for d in disponibles] == [lot_id]
    assert disponibles[0].quantite_disponible == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_donnees_invalides_salaison(session_test: AsyncSession) -> None:
    service = ServiceSalaison(session_test)

    with pytest.raises(DonneesInvalidesSalaison):
        await service.creer_lot(nom_produit="Szynka", quantite=0, date_debut=date(2024, 3, 5))
    with pytest.raises(DonneesInvalidesSalaison):
        await service.creer_lot(
            nom_produit="Szynka", quantite=5.0, date_debut=date(2024, 3, 5), pourcentage_sel_nitrite=120.0
        )
