from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from masarnia.core.configuration import parametres_application


logger = logging.getLogger(__name__)

# Un moteur async est lié à la boucle asyncio qui l'a créé : uvicorn n'en a qu'une,
# les tests et les scripts en créent plusieurs. Cache par boucle.
_fabriques_par_boucle: dict[int, async_sessionmaker[AsyncSession]] = {}


def _cle_boucle() -> int:
    try:
        return id(asyncio.get_running_loop())
    except RuntimeError:
        return 0


def _activer_cles_etrangeres_sqlite(connexion_dbapi, _enregistrement) -> None:
    # Sans ce PRAGMA, SQLite ignore les ON DELETE des lignes matière et du journal d'audit.
    curseur = connexion_dbapi.cursor()
    curseur.execute("PRAGMA foreign_keys=ON")
    curseur.close()


def creer_moteur_async(url: str | None = None) -> AsyncEngine:
    url = url or parametres_application.url_base_donnees

    if url.startswith("sqlite"):
        moteur = create_async_engine(url)
        event.listen(moteur.sync_engine, "connect", _activer_cles_etrangeres_sqlite)
        return moteur

    return create_async_engine(url, pool_pre_ping=True)


def obtenir_fabrique_session() -> async_sessionmaker[AsyncSession]:
    cle = _cle_boucle()

    fabrique = _fabriques_par_boucle.get(cle)
    if fabrique is None:
        fabrique = async_sessionmaker(bind=creer_moteur_async(), class_=AsyncSession, expire_on_commit=False)
        _fabriques_par_boucle[cle] = fabrique
        logger.info("moteur_cree boucle=%s", cle)

    return fabrique


async def fermer_moteur() -> None:
    """Libère le pool de la boucle courante (arrêt de l'API, fin d'un script)."""

    fabrique = _fabriques_par_boucle.pop(_cle_boucle(), None)
    if fabrique is not None and fabrique.kw.get("bind") is not None:
        await fabrique.kw["bind"].dispose()


async def fournir_session_async() -> AsyncIterator[AsyncSession]:
    async with obtenir_fabrique_session()() as session:
        yield session
