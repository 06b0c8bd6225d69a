from __future__ import annotations

from uuid import uuid4

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import RoleUtilisateur, TypePointTemperature
from masarnia.domaine.modeles.hygiene import PointTemperature
from masarnia.domaine.modeles.referentiel import Produit
from masarnia.domaine.services.temperatures import ServiceTemperatures
from tests._auth_helpers import creer_utilisateur, entetes_auth
from tests._http_helpers import app_avec_dependances_test, client_api


@pytest.mark.asyncio
async def test_releve_hors_plage_visible_dans_les_actions(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    point = PointTemperature(
        nom="Chłodnia nr 2", type_point=TypePointTemperature.COOLER, temperature_min=0.0, temperature_max=4.0
    )
    session_test.add(point)
    await session_test.commit()
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        conforme = await client.post(
            "/api/temperature/readings", json={"point_temperature_id": str(point.id), "temperature": 3.5}, headers=h
        )
        assert conforme.status_code == 201, conforme.text
        assert conforme.json()["conforme"] is True

        hors_plage = await client.post(
            "/api/temperature/readings", json={"point_temperature_id": str(point.id), "temperature": 5.0}, headers=h
        )
        assert hors_plage.status_code == 201, hors_plage.text
        assert hors_plage.json()["conforme"] is False

        inconnu = await client.post(
            "/api/temperature/readings", json={"point_temperature_id": str(uuid4()), "temperature": 2.0}, headers=h
        )
        assert inconnu.status_code == 404

        actions = (await client.get("/api/corrective-actions", headers=h)).json()

    assert len(actions) == 1
    assert actions[0]["priorite"] == "HIGH"
    assert actions[0]["origine"] == "TEMPERATURE"
    assert actions[0]["statut"] == "OPEN"


@pytest.mark.asyncio
async def test_action_corrective_manuelle_cycle(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        basse = await client.post(
            "/api/corrective-actions",
            json={"titre": "Joint de porte", "description": "Joint abîmé sur la chambre froide", "priorite": "LOW"},
            headers=h,
        )
        assert basse.status_code == 201, basse.text
        assert basse.json()["origine"] == "MANUAL"
        assert basse.json()["statut"] == "OPEN"

        critique = await client.post(
            "/api/corrective-actions",
            json={"titre": "Chambre froide HS", "description": "Compresseur arrêté", "priorite": "CRITICAL"},
            headers=h,
        )
        action_id = critique.json()["id"]

        liste = (await client.get("/api/corrective-actions", headers=h)).json()
        assert [a["titre"] for a in liste] == ["Chambre froide HS", "Joint de porte"]

        terminee = await client.patch(
            f"/api/corrective-actions/{action_id}",
            json={"statut": "COMPLETED", "action_menee": "Compresseur remplacé"},
            headers=h,
        )
        assert terminee.status_code == 200
        assert terminee.json()["realisee_le"] is not None

        rouverte = await client.patch(
            f"/api/corrective-actions/{action_id}", json={"statut": "IN_PROGRESS"}, headers=h
        )
        assert rouverte.json()["realisee_le"] is None

        filtre = (await client.get("/api/corrective-actions?priorite=LOW", headers=h)).json()
        assert [a["titre"] for a in filtre] == ["Joint de porte"]

        assert (await client.get(f"/api/corrective-actions/{uuid4()}", headers=h)).status_code == 404


@pytest.mark.asyncio
async def test_production_par_api(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    produit = Produit(nom="Kiełbasa krakowska", duree_conservation_jours=14)
    session_test.add(produit)
    await session_test.commit()
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        cree = await client.post(
            "/api/production/batches",
            json={"produit_id": str(produit.id), "quantite": 42.0, "date_production": "2024-03-05"},
            headers=h,
        )
        assert cree.status_code == 201, cree.text
        lot = cree.json()
        assert lot["numero_lot"] == "20240305"
        assert lot["date_peremption"] == "2024-03-19"
        assert lot["operateur_id"] == str(employe.id)

        assert (await client.post(f"/api/production/batches/{lot['id']}/release", headers=h)).status_code == 409

        sans_temperature = await client.post(f"/api/production/batches/{lot['id']}/complete", json={}, headers=h)
        assert sans_temperature.status_code == 400

        termine = await client.post(
            f"/api/production/batches/{lot['id']}/complete", json={"temperature_finale": 68.0}, headers=h
        )
        assert termine.status_code == 200, termine.text
        assert termine.json()["statut"] == "COMPLETED"
        assert termine.json()["temperature_conforme"] is False

        modif = await client.patch(f"/api/production/batches/{lot['id']}", json={"quantite": 40.0}, headers=h)
        assert modif.status_code == 409
        assert (await client.delete(f"/api/production/batches/{lot['id']}", headers=h)).status_code == 409

        bloque = await client.post(
            f"/api/production/batches/{lot['id']}/block", json={"notes": "Cuisson à refaire"}, headers=h
        )
        assert bloque.json()["statut"] == "BLOCKED"

        actions = (await client.get("/api/corrective-actions?origine=PRODUCTION", headers=h)).json()
        assert len(actions) == 1
        assert actions[0]["reference"] == lot["id"]

        chronologie = await client.get(f"/api/production/traceability/{lot['id']}", headers=h)
        assert chronologie.status_code == 200
        types_evenements = [e["type_evenement"] for e in chronologie.json()["evenements"]]
        assert types_evenements[0] == "PRODUCTION"
        assert sorted(types_evenements[1:]) == ["ACTION_CORRECTIVE", "CUISSON"]

        assert (await client.get(f"/api/production/traceability/{uuid4()}", headers=h)).status_code == 404


@pytest.mark.asyncio
async def test_lot_en_cours_supprimable(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    produit = Produit(nom="Pasztet", duree_conservation_jours=5)
    session_test.add(produit)
    await session_test.commit()
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        lot = (
            await client.post(
                "/api/production/batches", json={"produit_id": str(produit.id), "quantite": 10.0}, headers=h
            )
        ).json()

        assert (await client.delete(f"/api/production/batches/{lot['id']}", headers=h)).status_code == 200
        assert (await client.get(f"/api/production/batches/{lot['id']}", headers=h)).status_code == 404


@pytest.mark.asyncio
async def test_plan_haccp_roles_et_significativite(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    responsable = await creer_utilisateur(session_test, role=RoleUtilisateur.MANAGER)
    ccp = {"code": "CCP1", "nom": "Réception des viandes", "limite_critique": "≤ 4°C"}

    async with client_api(session_test) as client:
        assert (await client.post("/api/haccp-plan/ccps", json=ccp, headers=entetes_auth(employe))).status_code == 403

        cree = await client.post("/api/haccp-plan/ccps", json=ccp, headers=entetes_auth(responsable))
        assert cree.status_code == 201, cree.text

        doublon = await client.post("/api/haccp-plan/ccps", json=ccp, headers=entetes_auth(responsable))
        assert doublon.status_code == 409

        danger = await client.post(
            "/api/haccp-plan/hazards",
            json={
                "nom": "Listeria monocytogenes",
                "type_danger": "BIOLOGICAL",
                "gravite": "HIGH",
                "probabilite": "MEDIUM",
                "ccp_id": cree.json()["id"],
            },
            headers=entetes_auth(responsable),
        )
        assert danger.status_code == 201, danger.text
        assert danger.json()["significativite"] == 6


@pytest.mark.asyncio
async def test_rapport_pdf_par_api(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        r = await client.get("/api/reports/temperature?du=2024-01-01&au=2024-01-31", headers=h)
        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert r.content.startswith(b"%PDF")

        inverse = await client.get("/api/reports/temperature?du=2024-02-01&au=2024-01-01", headers=h)
        assert inverse.status_code == 400

        for registre in ("receptions", "cleaning", "pest-control", "waste"):
            r = await client.get(f"/api/reports/{registre}?du=2024-01-01&au=2024-01-31", headers=h)
            assert r.status_code == 200, registre
            assert r.content.startswith(b"%PDF")

        plan = await client.get("/api/reports/haccp-plan", headers=h)
        assert plan.status_code == 200
        assert plan.headers["content-disposition"] == 'inline; filename="plan_haccp.pdf"'


@pytest.mark.asyncio
async def test_patch_null_sur_champ_obligatoire_refuse(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    point = PointTemperature(
        nom="Chłodnia nr 1",
        emplacement="Hala A",
        type_point=TypePointTemperature.COOLER,
        temperature_min=0.0,
        temperature_max=4.0,
    )
    session_test.add(point)
    await session_test.commit()
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        r = await client.patch(f"/api/temperature/points/{point.id}", json={"temperature_min": None}, headers=h)
        assert r.status_code == 422
        assert "temperature_min" in r.json()["detail"]

        # Un champ facultatif peut toujours être effacé
        efface = await client.patch(f"/api/temperature/points/{point.id}", json={"emplacement": None}, headers=h)
        assert efface.status_code == 200, efface.text
        assert efface.json()["emplacement"] is None

        points = (await client.get("/api/temperature/points", headers=h)).json()

    assert points[0]["temperature_min"] == pytest.approx(0.0)
    assert points[0]["temperature_max"] == pytest.approx(4.0)


@pytest.mark.asyncio
async def test_patch_null_action_et_danger_refuse(session_test: AsyncSession) -> None:
    responsable = await creer_utilisateur(session_test, role=RoleUtilisateur.MANAGER)
    h = entetes_auth(responsable)

    async with client_api(session_test) as client:
        action = (
            await client.post(
                "/api/corrective-actions",
                json={"titre": "Lampe UV", "description": "Lampe grillée en salle de découpe", "priorite": "LOW"},
                headers=h,
            )
        ).json()
        r = await client.patch(f"/api/corrective-actions/{action['id']}", json={"statut": None}, headers=h)
        assert r.status_code == 422

        danger = (
            await client.post(
                "/api/haccp-plan/hazards",
                json={"nom": "Corps étranger", "type_danger": "PHYSICAL", "gravite": "MEDIUM", "probabilite": "LOW"},
                headers=h,
            )
        ).json()
        r = await client.patch(f"/api/haccp-plan/hazards/{danger['id']}", json={"gravite": None}, headers=h)
        assert r.status_code == 422

        dangers = (await client.get("/api/haccp-plan/hazards", headers=h)).json()

    assert dangers[0]["gravite"] == "MEDIUM"
    assert dangers[0]["significativite"] == 2


@pytest.mark.asyncio
async def test_erreur_inattendue_reponse_generique(
    session_test: AsyncSession, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    employe = await creer_utilisateur(session_test)
    point = PointTemperature(
        nom="Mroźnia", type_point=TypePointTemperature.FREEZER, temperature_min=-25.0, temperature_max=-18.0
    )
    session_test.add(point)
    await session_test.commit()

    async def _base_indisponible(self, **_kwargs):
        raise RuntimeError("connexion postgres 10.0.0.5:5432 refusee user=masarnia")

    monkeypatch.setattr(ServiceTemperatures, "enregistrer_releve", _base_indisponible)

    # Starlette renvoie la 500 puis relance l'exception vers le serveur
    transport = httpx.ASGITransport(app=app_avec_dependances_test(session_test), raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.post(
            "/api/temperature/readings",
            json={"point_temperature_id": str(point.id), "temperature": -20.0},
            headers=entetes_auth(employe),
        )

    assert r.status_code == 500
    assert r.json() == {"detail": "Erreur interne du serveur."}
    assert "10.0.0.5" not in r.text
    assert any(e.getMessage().startswith("erreur_inattendue") and e.exc_info for e in caplog.records)
