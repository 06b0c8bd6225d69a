from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import (
    CategorieMatierePremiere,
    MethodeSalaison,
    NiveauRisque,
    StatutControleNuisibles,
    TypeDanger,
    TypePointNuisibles,
    TypePointTemperature,
)
from masarnia.domaine.modeles.dechets import EnregistrementDechet, TypeDechet
from masarnia.domaine.modeles.haccp import CCP, Danger
from masarnia.domaine.modeles.hygiene import (
    ControleNuisibles,
    EnregistrementNettoyage,
    PointNuisibles,
    PointTemperature,
    ZoneNettoyage,
)
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Fournisseur, MatierePremiere, ParametresEntreprise, Produit
from masarnia.domaine.services.etiquettes import LotSalaisonIntrouvableEtiquette, ServiceEtiquettes
from masarnia.domaine.services.production import ServiceProduction
from masarnia.domaine.services.rapports_pdf import PeriodeInvalide, ServiceRapportsPDF
from masarnia.domaine.services.salaison import ServiceSalaison
from masarnia.domaine.services.temperatures import ServiceTemperatures


@pytest.mark.asyncio
async def test_rapport_temperatures_pdf(session_test: AsyncSession) -> None:
    session_test.add(ParametresEntreprise(nom_entreprise="Masarnia Testowa", numero_veterinaire="12345678"))
    point = PointTemperature(
        nom="Chlodnia 1", type_point=TypePointTemperature.COOLER, temperature_min=0.0, temperature_max=4.0
    )
    session_test.add(point)
    await session_test.commit()

    service = ServiceTemperatures(session_test)
    await service.enregistrer_releve(point_temperature_id=point.id, temperature=2.0)
    await service.enregistrer_releve(point_temperature_id=point.id, temperature=7.5)

    rapports = ServiceRapportsPDF(session_test)
    aujourd_hui = date.today()
    donnees = await rapports.donnees_temperatures(du=aujourd_hui - timedelta(days=1), au=aujourd_hui + timedelta(days=1))

    assert donnees.entreprise == "Masarnia Testowa (n° vétérinaire 12345678)"
    assert len(donnees.lignes) == 2
    assert "Relevés : 2" in donnees.synthese
    assert "Conformes : 1 (50.0%)" in donnees.synthese

    pdf = await rapports.rapport_temperatures(du=aujourd_hui - timedelta(days=1), au=aujourd_hui + timedelta(days=1))
    assert pdf.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_rapports_vides_et_periode_invalide(session_test: AsyncSession) -> None:
    rapports = ServiceRapportsPDF(session_test)
    du, au = date(2024, 1, 1), date(2024, 1, 31)

    for pdf in (
        await rapports.rapport_temperatures(du=du, au=au),
        await rapports.rapport_audits(du=du, au=au),
        await rapports.rapport_production(du=du, au=au),
        await rapports.rapport_salaison(du=du, au=au),
        await rapports.rapport_receptions(du=du, au=au),
        await rapports.rapport_nettoyage(du=du, au=au),
        await rapports.rapport_nuisibles(du=du, au=au),
        await rapports.rapport_dechets(du=du, au=au),
        await rapports.rapport_plan_haccp(),
    ):
        assert pdf.startswith(b"%PDF")

    with pytest.raises(PeriodeInvalide):
        await rapports.rapport_audits(du=au, au=du)


@pytest.mark.asyncio
async def test_rapport_production_et_salaison(session_test: AsyncSession) -> None:
    produit = Produit(nom="Kielbasa", duree_conservation_jours=7)
    session_test.add(produit)
    await session_test.commit()

    production = ServiceProduction(session_test)
    lot_id = await production.creer_lot(produit_id=produit.id, quantite=12.5, date_production=date(2024, 3, 5))
    await production.terminer_lot(lot_id=lot_id, temperature_finale=74.0)
    await ServiceSalaison(session_test).creer_lot(
        nom_produit="Szynka", quantite=8.0, date_debut=date(2024, 3, 6), methode=MethodeSalaison.INJECTION
    )

    rapports = ServiceRapportsPDF(session_test)
    donnees_production = await rapports.donnees_production(du=date(2024, 3, 1), au=date(2024, 3, 31))
    donnees_salaison = await rapports.donnees_salaison(du=date(2024, 3, 1), au=date(2024, 3, 31))

    assert len(donnees_production.lignes) == 1
    assert donnees_production.lignes[0][1] == "20240305"
    assert len(donnees_salaison.lignes) == 1
    assert (await rapports.rapport_production(du=date(2024, 3, 1), au=date(2024, 3, 31))).startswith(b"%PDF")


@pytest.mark.asyncio
async def test_registres_reception_nettoyage_nuisibles_dechets(session_test: AsyncSession) -> None:
    le_5_mars = datetime(2024, 3, 5, 7, 30, tzinfo=timezone.utc)

    fournisseur = Fournisseur(nom="Ferma Nowak", agree=True)
    matiere = MatierePremiere(nom="Łopatka wieprzowa", categorie=CategorieMatierePremiere.MEAT)
    zone = ZoneNettoyage(nom="Hala rozbioru")
    point = PointNuisibles(nom="Stacja 3", emplacement="Rampa", type_point=TypePointNuisibles.BAIT_STATION)
    type_dechet = TypeDechet(nom="Kości", categorie="Kategoria 3")
    session_test.add_all([fournisseur, matiere, zone, point, type_dechet])
    await session_test.flush()

    session_test.add_all(
        [
            ReceptionMatierePremiere(
                matiere_premiere_id=matiere.id,
                fournisseur_id=fournisseur.id,
                numero_lot="FN-0305",
                quantite=300.0,
                temperature=3.1,
                conforme=True,
                recue_le=le_5_mars,
            ),
            ReceptionMatierePremiere(
                matiere_premiere_id=matiere.id,
                fournisseur_id=fournisseur.id,
                numero_lot="FN-0306",
                quantite=120.0,
                temperature=9.0,
                conforme=False,
                recue_le=le_5_mars + timedelta(days=1),
            ),
            # Hors période
            ReceptionMatierePremiere(
                matiere_premiere_id=matiere.id,
                fournisseur_id=fournisseur.id,
                numero_lot="FN-0401",
                quantite=50.0,
                recue_le=datetime(2024, 4, 1, 8, 0, tzinfo=timezone.utc),
            ),
            EnregistrementNettoyage(zone_nettoyage_id=zone.id, methode="Piana", verifie=True, nettoye_le=le_5_mars),
            EnregistrementNettoyage(zone_nettoyage_id=zone.id, verifie=False, nettoye_le=le_5_mars),
            ControleNuisibles(
                point_nuisibles_id=point.id,
                statut=StatutControleNuisibles.ACTIVITY_DETECTED,
                constatations="Ślady gryzoni",
                controle_le=le_5_mars,
            ),
            ControleNuisibles(
                point_nuisibles_id=point.id,
                statut=StatutControleNuisibles.OK,
                controle_le=le_5_mars + timedelta(days=7),
            ),
            EnregistrementDechet(type_dechet_id=type_dechet.id, quantite=120.0, date_collecte=date(2024, 3, 5)),
            EnregistrementDechet(type_dechet_id=type_dechet.id, quantite=80.5, date_collecte=date(2024, 3, 19)),
        ]
    )
    await session_test.commit()

    rapports = ServiceRapportsPDF(session_test)
    du, au = date(2024, 3, 1), date(2024, 3, 31)

    receptions = await rapports.donnees_receptions(du=du, au=au)
    assert [ligne[3] for ligne in receptions.lignes] == ["FN-0305", "FN-0306"]
    assert receptions.lignes[1][-1] == "NON CONFORME"
    assert "Conformes : 1 (50.0%)" in receptions.synthese

    nettoyage = await rapports.donnees_nettoyage(du=du, au=au)
    assert len(nettoyage.lignes) == 2
    assert "Vérifiés : 1/2 (50.0%)" in nettoyage.synthese

    nuisibles = await rapports.donnees_nuisibles(du=du, au=au)
    assert [ligne[4] for ligne in nuisibles.lignes] == ["ACTIVITY_DETECTED", "OK"]
    assert "Activité ou intervention requise : 1" in nuisibles.synthese

    dechets = await rapports.donnees_dechets(du=du, au=au)
    assert len(dechets.lignes) == 2
    assert "Total Kości : 200.5 kg" in dechets.synthese

    for pdf in (
        await rapports.rapport_receptions(du=du, au=au),
        await rapports.rapport_nettoyage(du=du, au=au),
        await rapports.rapport_nuisibles(du=du, au=au),
        await rapports.rapport_dechets(du=du, au=au),
    ):
        assert pdf.startswith(b"%PDF")

    with pytest.raises(PeriodeInvalide):
        await rapports.rapport_dechets(du=au, au=du)


@pytest.mark.asyncio
async def test_plan_haccp_pdf(session_test: AsyncSession) -> None:
    ccp = CCP(code="CCP1", nom="Obróbka termiczna", limite_critique="≥ 72°C à cœur")
    inactif = CCP(code="CCP9", nom="Ancien point", actif=False)
    session_test.add_all([ccp, inactif])
    await session_test.flush()
    session_test.add_all(
        [
            Danger(
                nom="Listeria monocytogenes",
                type_danger=TypeDanger.BIOLOGICAL,
                gravite=NiveauRisque.HIGH,
                probabilite=NiveauRisque.MEDIUM,
                significativite=6,
                ccp_id=ccp.id,
            ),
            Danger(
                nom="Odłamki kości",
                type_danger=TypeDanger.PHYSICAL,
                gravite=NiveauRisque.MEDIUM,
                probabilite=NiveauRisque.LOW,
                significativite=2,
            ),
        ]
    )
    await session_test.commit()

    rapports = ServiceRapportsPDF(session_test)
    donnees = await rapports.donnees_plan_haccp()

    assert donnees.du is None and donnees.au is None
    assert [ligne[0] for ligne in donnees.lignes] == ["Listeria monocytogenes", "Odłamki kości"]
    assert [ligne[5] for ligne in donnees.lignes] == ["CCP1", "-"]
    assert "CCP actifs : 1" in donnees.synthese
    assert (await rapports.rapport_plan_haccp()).startswith(b"%PDF")


@pytest.mark.asyncio
async def test_etiquette_salaison(session_test: AsyncSession) -> None:
    lot = await ServiceSalaison(session_test).creer_lot(
        nom_produit="Szynka",
        quantite=18.0,
        date_debut=date(2024, 3, 5),
        methode=MethodeSalaison.INJECTION,
        description_viande="Szynka bez kosci",
    )

    etiquettes = ServiceEtiquettes(session_test)
    donnees = await etiquettes.donnees_etiquette_salaison(lot.id)
    assert donnees.numero_lot == "05-03"
    assert donnees.quantite == "18 kg"
    assert donnees.date_fin_prevue == date(2024, 3, 12)
    assert (donnees.largeur_mm, donnees.hauteur_mm) == (60, 40)

    pdf = await etiquettes.etiquette_salaison(lot.id)
    assert pdf.startswith(b"%PDF")

    with pytest.raises(LotSalaisonIntrouvableEtiquette):
        await etiquettes.etiquette_salaison(uuid4())
