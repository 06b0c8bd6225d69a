"""Helpers HTTP STRICTEMENT côté tests.

L'application est construite avec une session liée au moteur de test, y compris
pour le journal d'audit du middleware.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.main import creer_application


def app_avec_dependances_test(session_test: AsyncSession) -> FastAPI:
    moteur = session_test.bind
    assert moteur is not None

    app = creer_application(fabrique_session_audit=lambda: AsyncSession(bind=moteur, expire_on_commit=False))

    # Override DB : nouvelle session liée au même engine que le test
    async def _fournir_session_override():
        async with AsyncSession(bind=moteur, expire_on_commit=False) as s:
            yield s

    app.dependency_overrides[fournir_session] = _fournir_session_override
    return app


def client_api(session_test: AsyncSession) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app_avec_dependances_test(session_test))
    return httpx.AsyncClient(transport=transport, base_url="http://test")
