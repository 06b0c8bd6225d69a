from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import (
    CategorieMatierePremiere,
    MethodeSalaison,
    OrigineActionCorrective,
    StatutLotProduction,
    TypeSourceMatiere,
)
from masarnia.domaine.modeles.haccp import CCP, ActionCorrective
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Fournisseur, MatierePremiere, Produit
from masarnia.domaine.services.conformite import PolitiqueConformite
from masarnia.domaine.services.production import (
    DonneesInvalidesProduction,
    LigneMatiereDemandee,
    ServiceProduction,
    TransitionStatutInterditeProduction,
)
from masarnia.domaine.services.salaison import ServiceSalaison
from masarnia.domaine.services.tracabilite import LotIntrouvableTracabilite, ServiceTracabilite


async def _produit(session: AsyncSession, *, temperature_requise: float | None = None) -> Produit:
    produit = Produit(nom="Kiełbasa zwyczajna", duree_conservation_jours=10, temperature_requise=temperature_requise)
    session.add(produit)
    await session.commit()
    return produit


async def _actions(session: AsyncSession) -> list[ActionCorrective]:
    return list((await session.execute(select(ActionCorrective))).scalars().all())


@pytest.mark.asyncio
async def test_creation_lot_numero_et_peremption(session_test: AsyncSession) -> None:
    produit = await _produit(session_test)
    service = ServiceProduction(session_test)

    premier_id = await service.creer_lot(produit_id=produit.id, quantite=50.0, date_production=date(2024, 3, 5))
    second_id = await service.creer_lot(produit_id=produit.id, quantite=20.0, date_production=date(2024, 3, 5))

    premier = await service.charger_lot_complet(premier_id)
    second = await service.charger_lot_complet(second_id)
    assert premier.numero_lot == "20240305"
    assert second.numero_lot == "20240305-2"
    assert premier.date_peremption == date(2024, 3, 15)
    assert premier.statut == StatutLotProduction.IN_PROGRESS
    assert premier.lignes_matiere == []


@pytest.mark.asyncio
async def test_cuisson_conforme_sans_action(session_test: AsyncSession) -> None:
    produit = await _produit(session_test)
    service = ServiceProduction(session_test)
    lot_id = await service.creer_lot(produit_id=produit.id, quantite=50.0, date_production=date(2024, 3, 5))

    lot = await service.terminer_lot(lot_id=lot_id, temperature_finale=72.0)

    assert lot.statut == StatutLotProduction.COMPLETED
    assert lot.temperature_conforme is True
    assert lot.heure_fin is not None
    assert await _actions(session_test) == []


@pytest.mark.asyncio
async def test_cuisson_insuffisante_ouvre_une_action_liee_au_ccp(session_test: AsyncSession) -> None:
    ccp = CCP(code="CCP3", nom="Obróbka termiczna", actif=True)
    session_test.add(ccp)
    await session_test.commit()
    produit = await _produit(session_test)
    service = ServiceProduction(session_test)
    lot_id = await service.creer_lot(produit_id=produit.id, quantite=50.0, date_production=date(2024, 3, 5))

    lot = await service.terminer_lot(lot_id=lot_id, temperature_finale=68.0)

    assert lot.statut == StatutLotProduction.COMPLETED
    assert lot.temperature_conforme is False
    actions = await _actions(session_test)
    assert len(actions) == 1
    assert actions[0].origine == OrigineActionCorrective.PRODUCTION
    assert actions[0].reference == str(lot_id)
    assert actions[0].ccp_id == ccp.id
    assert actions[0].cause == "Traitement thermique insuffisant"


@pytest.mark.asyncio
async def test_temperature_requise_par_produit_puis_configuration(session_test: AsyncSession) -> None:
    produit = await _produit(session_test, temperature_requise=70.0)

    lot_id = await ServiceProduction(session_test).creer_lot(
        produit_id=produit.id, quantite=10.0, date_production=date(2024, 3, 5)
    )
    lot = await ServiceProduction(session_test).terminer_lot(lot_id=lot_id, temperature_finale=71.0)
    assert lot.temperature_conforme is True

    politique = PolitiqueConformite(temperatures_cuisson_par_produit={produit.id: 75.0})
    service = ServiceProduction(session_test, politique=politique)
    autre_id = await service.creer_lot(produit_id=produit.id, quantite=10.0, date_production=date(2024, 3, 6))
    autre = await service.terminer_lot(lot_id=autre_id, temperature_finale=71.0)
    assert autre.temperature_conforme is False


@pytest.mark.asyncio
async def test_transitions_interdites(session_test: AsyncSession) -> None:
    produit = await _produit(session_test)
    service = ServiceProduction(session_test)
    lot_id = await service.creer_lot(produit_id=produit.id, quantite=50.0, date_production=date(2024, 3, 5))

    with pytest.raises(TransitionStatutInterditeProduction):
        await service.liberer_lot(lot_id=lot_id)
    with pytest.raises(DonneesInvalidesProduction):
        await service.terminer_lot(lot_id=lot_id, temperature_finale=None)

    await service.terminer_lot(lot_id=lot_id, temperature_finale=75.0)
    libere = await service.liberer_lot(lot_id=lot_id)
    assert libere.statut == StatutLotProduction.RELEASED

    with pytest.raises(TransitionStatutInterditeProduction):
        await service.bloquer_lot(lot_id=lot_id)
    with pytest.raises(TransitionStatutInterditeProduction):
        await service.terminer_lot(lot_id=lot_id, temperature_finale=80.0)


@pytest.mark.asyncio
async def test_ligne_matiere_sans_reference_refusee(session_test: AsyncSession) -> None:
    produit = await _produit(session_test)

    with pytest.raises(DonneesInvalidesProduction):
        await ServiceProduction(session_test).creer_lot(
            produit_id=produit.id,
            quantite=10.0,
            date_production=date(2024, 3, 5),
            lignes=[LigneMatiereDemandee(type_source=TypeSourceMatiere.CURING_BATCH, quantite=5.0)],
        )


@pytest.mark.asyncio
async def test_chronologie_remonte_reception_et_salaison(session_test: AsyncSession) -> None:
    fournisseur = Fournisseur(nom="Ferma Nowak", agree=True)
    matiere = MatierePremiere(nom="Szynka wieprzowa", categorie=CategorieMatierePremiere.MEAT)
    session_test.add_all([fournisseur, matiere])
    await session_test.flush()
    reception = ReceptionMatierePremiere(
        matiere_premiere_id=matiere.id,
        fournisseur_id=fournisseur.id,
        numero_lot="R-77",
        quantite=100.0,
        temperature=3.0,
        conforme=True,
        recue_le=datetime(2024, 3, 1, 7, 30, tzinfo=timezone.utc),
    )
    session_test.add(reception)
    await session_test.commit()
    produit = await _produit(session_test)

    salaison = await ServiceSalaison(session_test).creer_lot(
        nom_produit="Szynka",
        quantite=40.0,
        date_debut=date(2024, 3, 2),
        methode=MethodeSalaison.INJECTION,
        reception_id=reception.id,
    )
    await ServiceSalaison(session_test).terminer_lot(lot_id=salaison.id, date_fin_reelle=date(2024, 3, 9))

    service = ServiceProduction(session_test)
    lot_id = await service.creer_lot(
        produit_id=produit.id,
        quantite=35.0,
        date_production=date(2024, 3, 10),
        heure_debut=datetime(2024, 3, 10, 6, 0, tzinfo=timezone.utc),
        lignes=[
            LigneMatiereDemandee(
                type_source=TypeSourceMatiere.CURING_BATCH, lot_salaison_id=salaison.id, quantite=30.0
            ),
        ],
    )
    await service.terminer_lot(
        lot_id=lot_id, temperature_finale=73.0, heure_fin=datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
    )

    chronologie = await ServiceTracabilite(session_test).chronologie(lot_id)

    assert chronologie.numero_lot == "20240310"
    assert [e.type_evenement for e in chronologie.evenements] == ["RECEPTION", "SALAISON", "PRODUCTION", "CUISSON"]
    assert chronologie.evenements[0].details["Fournisseur"] == "Ferma Nowak"
    assert chronologie.evenements[0].details["Document"] == "N/A"
    assert chronologie.evenements[1].details["Numéro de lot"] == "02-03"

    aval = await ServiceTracabilite(session_test).lots_utilisant_reception(reception.id)
    assert [lot.id for lot in aval] == [lot_id]

    disponibles = await ServiceSalaison(session_test).lots_termines_disponibles()
    assert disponibles[0].quantite_disponible == pytest.approx(10.0)


@pytest.mark.asyncio
async def test_chronologie_lot_inconnu(session_test: AsyncSession) -> None:
    from uuid import uuid4

    with pytest.raises(LotIntrouvableTracabilite):
        await ServiceTracabilite(session_test).chronologie(uuid4())

