from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.core.base_donnees import fournir_session_async
from masarnia.core.configuration import parametres_application
from masarnia.domaine.enums.types import PolitiqueStockInsuffisant
from masarnia.domaine.services.conformite import PolitiqueConformite


async def fournir_session() -> AsyncIterator[AsyncSession]:
    """Dépendance FastAPI : fournit une session SQLAlchemy asynchrone."""

    async for session in fournir_session_async():
        yield session


def fournir_politique_conformite() -> PolitiqueConformite:
    """Dépendance FastAPI : seuils de conformité (surchargeable en test)."""

    return PolitiqueConformite.depuis_parametres(parametres_application)


def fournir_politique_stock() -> PolitiqueStockInsuffisant:
    """Dépendance FastAPI : comportement quand le sel nitrité manque en stock."""

    return parametres_application.politique_stock_insuffisant
