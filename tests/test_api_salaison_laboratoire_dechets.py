from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_stock
from masarnia.domaine.enums.types import PolitiqueStockInsuffisant
from masarnia.domaine.modeles.receptions import ReceptionMateriau
from masarnia.domaine.modeles.referentiel import Materiau
from tests._auth_helpers import creer_utilisateur, entetes_auth
from tests._http_helpers import app_avec_dependances_test, client_api


async def _sel_nitrite(session: AsyncSession, solde: float) -> None:
    materiau = Materiau(nom="Sól peklowa", categorie="ADDITIVES", unite="kg", stock_actuel=solde)
    session.add(materiau)
    await session.flush()
    session.add(
        ReceptionMateriau(
            materiau_id=materiau.id,
            numero_lot="SP-1",
            quantite=solde,
            recue_le=datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc),
        )
    )
    await session.commit()


_LOT_SEC = {
    "nom_produit": "Szynka",
    "quantite": 25.0,
    "date_debut": "2024-03-05",
    "methode": "DRY",
    "pourcentage_sel_nitrite": 2.0,
}


@pytest.mark.asyncio
async def test_salaison_deduction_et_etiquette(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    await _sel_nitrite(session_test, 2.0)
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        r = await client.post("/api/curing", json=_LOT_SEC, headers=h)
        assert r.status_code == 201, r.text
        corps = r.json()
        assert corps["lot"]["numero_lot"] == "05-03"
        assert corps["deduction_sel"]["quantite_demandee"] == pytest.approx(0.5)
        assert corps["deduction_sel"]["complete"] is True

        etiquette = await client.get(f"/api/labels/curing/{corps['lot']['id']}", headers=h)
        assert etiquette.status_code == 200
        assert etiquette.headers["content-type"] == "application/pdf"
        assert etiquette.content.startswith(b"%PDF")

        assert (await client.get(f"/api/labels/curing/{uuid4()}", headers=h)).status_code == 404


@pytest.mark.asyncio
async def test_salaison_stock_insuffisant_rejet(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    await _sel_nitrite(session_test, 0.2)

    app = app_avec_dependances_test(session_test)
    app.dependency_overrides[fournir_politique_stock] = lambda: PolitiqueStockInsuffisant.REJECT

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        r = await client.post("/api/curing", json=_LOT_SEC, headers=entetes_auth(employe))
        assert r.status_code == 409

        lots = await client.get("/api/curing", headers=entetes_auth(employe))
        assert lots.json() == []


@pytest.mark.asyncio
async def test_laboratoire_synthese(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        type_analyse = await client.post(
            "/api/lab-tests/types",
            json={"nom": "Listeria monocytogenes", "categorie": "Mikrobiologia", "norme_texte": "Nieobecne w 25 g"},
            headers=h,
        )
        assert type_analyse.status_code == 201, type_analyse.text
        type_id = type_analyse.json()["id"]

        for conforme in (True, True, False, None):
            r = await client.post(
                "/api/lab-tests",
                json={"type_analyse_id": type_id, "date_prelevement": "2024-03-05", "conforme": conforme},
                headers=h,
            )
            assert r.status_code == 201, r.text

        synthese = (await client.get("/api/lab-tests/stats/summary", headers=h)).json()
        assert synthese == {
            "total": 4,
            "conformes": 2,
            "non_conformes": 1,
            "en_attente": 1,
            "taux_conformite": 66.7,
        }

        en_attente = (await client.get("/api/lab-tests?en_attente=true", headers=h)).json()
        assert len(en_attente) == 1

        inconnu = await client.post(
            "/api/lab-tests", json={"type_analyse_id": str(uuid4()), "date_prelevement": "2024-03-05"}, headers=h
        )
        assert inconnu.status_code == 400


@pytest.mark.asyncio
async def test_dechets_synthese_et_desactivation_du_type(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        type_dechet = (
            await client.post(
                "/api/waste/types", json={"nom": "Kości", "categorie": "Kategoria 3", "code": "02 02 02"}, headers=h
            )
        ).json()

        for quantite in (120.0, 80.5):
            r = await client.post(
                "/api/waste",
                json={"type_dechet_id": type_dechet["id"], "quantite": quantite, "date_collecte": "2024-03-05"},
                headers=h,
            )
            assert r.status_code == 201, r.text

        synthese = (await client.get("/api/waste/stats/summary", headers=h)).json()
        assert synthese["nb_enlevements"] == 2
        assert synthese["par_type"][0]["quantite_totale"] == pytest.approx(200.5)

        suppression = await client.delete(f"/api/waste/types/{type_dechet['id']}", headers=h)
        assert suppression.json() == {"statut": "desactive"}

        refuse = await client.post(
            "/api/waste",
            json={"type_dechet_id": type_dechet["id"], "quantite": 10.0, "date_collecte": "2024-03-06"},
            headers=h,
        )
        assert refuse.status_code == 400


@pytest.mark.asyncio
async def test_patch_null_salaison_et_type_dechet_refuse(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)
    await _sel_nitrite(session_test, 2.0)
    h = entetes_auth(employe)

    async with client_api(session_test) as client:
        lot = (await client.post("/api/curing", json=_LOT_SEC, headers=h)).json()["lot"]

        r = await client.patch(f"/api/curing/{lot['id']}", json={"nom_produit": None}, headers=h)
        assert r.status_code == 422
        assert "nom_produit" in r.json()["detail"]

        corrige = await client.patch(f"/api/curing/{lot['id']}", json={"nom_produit": "Szynka wiejska"}, headers=h)
        assert corrige.status_code == 200, corrige.text
        assert corrige.json()["nom_produit"] == "Szynka wiejska"

        type_dechet = (
            await client.post("/api/waste/types", json={"nom": "Tłuszcz", "categorie": "Kategoria 3"}, headers=h)
        ).json()
        r = await client.patch(f"/api/waste/types/{type_dechet['id']}", json={"categorie": None}, headers=h)
        assert r.status_code == 422

        types = (await client.get("/api/waste/types", headers=h)).json()

    assert [t["categorie"] for t in types] == ["Kategoria 3"]
