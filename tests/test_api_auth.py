from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia import main
from masarnia.core.configuration import parametres_application
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.audit import JournalAudit
from tests._auth_helpers import creer_utilisateur, entetes_auth
from tests._http_helpers import client_api


@pytest.mark.asyncio
async def test_health_sans_auth(session_test: AsyncSession) -> None:
    async with client_api(session_test) as client:
        r = await client.get("/health")

    assert r.status_code == 200
    assert r.json()["statut"] == "ok"

    # /health n'est pas journalisé
    res = await session_test.execute(select(JournalAudit))
    assert res.scalars().all() == []


@pytest.mark.asyncio
async def test_token_manquant_ou_invalide(session_test: AsyncSession) -> None:
    async with client_api(session_test) as client:
        sans_token = await client.get("/api/temperature/points")
        token_bidon = await client.get("/api/auth/me", headers={"Authorization": "Bearer pas-un-jwt"})

    assert sans_token.status_code == 401
    assert sans_token.json()["detail"] == "Token manquant."
    assert token_bidon.status_code == 401


@pytest.mark.asyncio
async def test_utilisateur_inactif_refuse(session_test: AsyncSession) -> None:
    inactif = await creer_utilisateur(session_test, actif=False)

    async with client_api(session_test) as client:
        r = await client.get("/api/auth/me", headers=entetes_auth(inactif))

    assert r.status_code == 401


@pytest.mark.asyncio
async def test_inscription_puis_login(session_test: AsyncSession) -> None:
    inscription = {"email": "Anna.Nowak@Masarnia.test", "nom": "Anna Nowak", "mot_de_passe": "Kielbasa2024"}

    async with client_api(session_test) as client:
        r = await client.post("/api/auth/register", json=inscription)
        assert r.status_code == 201, r.text
        corps = r.json()
        assert corps["utilisateur"]["role"] == "EMPLOYEE"
        assert corps["utilisateur"]["email"] == "anna.nowak@masarnia.test"
        assert corps["type_token"] == "bearer"

        doublon = await client.post("/api/auth/register", json=inscription)
        assert doublon.status_code == 409

        mauvais = await client.post(
            "/api/auth/login", json={"email": "anna.nowak@masarnia.test", "mot_de_passe": "mauvais"}
        )
        assert mauvais.status_code == 401

        login = await client.post(
            "/api/auth/login", json={"email": "anna.nowak@masarnia.test", "mot_de_passe": "Kielbasa2024"}
        )
        assert login.status_code == 200, login.text
        token = login.json()["token_acces"]

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["nom"] == "Anna Nowak"
        assert me.json()["dernier_login_le"] is not None


@pytest.mark.asyncio
async def test_inscription_mot_de_passe_trop_court(session_test: AsyncSession) -> None:
    async with client_api(session_test) as client:
        r = await client.post(
            "/api/auth/register", json={"email": "jan@masarnia.test", "nom": "Jan", "mot_de_passe": "court"}
        )

    assert r.status_code == 422


@pytest.mark.asyncio
async def test_roles_utilisateurs_et_fournisseurs(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test, role=RoleUtilisateur.EMPLOYEE)
    admin = await creer_utilisateur(session_test, role=RoleUtilisateur.ADMIN)
    fournisseur = {"nom": "Ferma Nowak", "agree": True, "numero_veterinaire": "24640301"}

    async with client_api(session_test) as client:
        assert (await client.get("/api/users", headers=entetes_auth(employe))).status_code == 403

        refuse = await client.post("/api/suppliers", json=fournisseur, headers=entetes_auth(employe))
        assert refuse.status_code == 403
        assert refuse.json()["detail"] == "Accès interdit."

        cree = await client.post("/api/suppliers", json=fournisseur, headers=entetes_auth(admin))
        assert cree.status_code == 201, cree.text
        assert cree.json()["agree"] is True

        # La lecture reste ouverte à tout utilisateur authentifié
        liste = await client.get("/api/suppliers", headers=entetes_auth(employe))
        assert [f["nom"] for f in liste.json()] == ["Ferma Nowak"]

        utilisateurs = await client.get("/api/users", headers=entetes_auth(admin))
        assert utilisateurs.status_code == 200
        assert len(utilisateurs.json()) == 2


@pytest.mark.asyncio
async def test_journal_audit_masque_le_mot_de_passe(session_test: AsyncSession) -> None:
    employe = await creer_utilisateur(session_test)

    async with client_api(session_test) as client:
        await client.post("/api/auth/login", json={"email": "x@masarnia.test", "mot_de_passe": "secret123"})
        await client.get("/api/auth/me", headers=entetes_auth(employe))

    res = await session_test.execute(select(JournalAudit).order_by(JournalAudit.cree_le.asc()))
    entrees = list(res.scalars().all())

    assert [(e.methode_http, e.chemin, e.statut_http) for e in entrees] == [
        ("POST", "/api/auth/login", 401),
        ("GET", "/api/auth/me", 200),
    ]
    assert entrees[0].action == "CREATE"
    assert entrees[0].ressource == "auth"
    assert entrees[0].utilisateur_id is None
    assert entrees[0].donnees == {"email": "x@masarnia.test", "mot_de_passe": "***"}
    assert entrees[1].utilisateur_id == employe.id


@pytest.mark.asyncio
async def test_inscription_mot_de_passe_trop_long_pour_bcrypt(session_test: AsyncSession) -> None:
    # 40 caractères mais 80 octets en UTF-8
    async with client_api(session_test) as client:
        r = await client.post(
            "/api/auth/register", json={"email": "ola@masarnia.test", "nom": "Ola", "mot_de_passe": "ł" * 40}
        )

    assert r.status_code == 400


def test_lancer_sert_l_application_avec_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    appels = []
    monkeypatch.setattr(main.uvicorn, "run", lambda cible, **options: appels.append((cible, options)))
    monkeypatch.setattr(parametres_application, "port", 8081)

    main.lancer()

    assert appels == [
        ("masarnia.main:app", {"host": parametres_application.hote, "port": 8081, "log_config": None}),
    ]
