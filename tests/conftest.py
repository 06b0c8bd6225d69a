from __future__ import annotations

import os
from collections.abc import AsyncIterator
from pathlib import Path

import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from masarnia.domaine.modeles import BaseModele  # importe aussi tous les modèles


def _url_tests(tmp_path: Path) -> str:
    """URL_BASE_DONNEES_TESTS si fournie (PostgreSQL en CI), sinon SQLite fichier par test."""

    return os.getenv("URL_BASE_DONNEES_TESTS") or f"sqlite+aiosqlite:///{tmp_path / 'masarnia_tests.db'}"


@pytest_asyncio.fixture
async def moteur_test(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Moteur de base de données pour les tests.

    Scope function : un moteur async ne doit jamais être partagé entre plusieurs event loops.
    """

    moteur = create_async_engine(_url_tests(tmp_path))

    async with moteur.begin() as connexion:
        if moteur.dialect.name == "postgresql":
            # drop_all peut deadlocker si des connexions précédentes sont encore en teardown.
            await connexion.execute(text("DROP SCHEMA public CASCADE"))
            await connexion.execute(text("CREATE SCHEMA public"))
        else:
            await connexion.run_sync(BaseModele.metadata.drop_all)
        await connexion.run_sync(BaseModele.metadata.create_all)

    try:
        yield moteur
    finally:
        await moteur.dispose()


@pytest_asyncio.fixture
async def session_test(moteur_test: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Session SQLAlchemy async isolée par test."""

    fabrique = async_sessionmaker(
        bind=moteur_test,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with fabrique() as session:
        try:
            yield session
        finally:
            # rollback si le test a oublié de commit
            await session.rollback()
