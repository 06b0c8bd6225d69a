from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.middleware_audit import MiddlewareAudit
from masarnia.api.routeur import router
from masarnia.api.sante import routeur_sante
from masarnia.core.base_donnees import fermer_moteur, obtenir_fabrique_session
from masarnia.core.configuration import parametres_application
from masarnia.core.logging_config import configurer_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def _cycle_de_vie(_application: FastAPI) -> AsyncIterator[None]:
    yield
    await fermer_moteur()


def creer_application(*, fabrique_session_audit: Callable[[], AsyncSession] | None = None) -> FastAPI:
    configurer_logging()

    application = FastAPI(title="Masarnia HACCP", lifespan=_cycle_de_vie)

    # Middleware audit (append-only)
    application.add_middleware(
        MiddlewareAudit,
        fabrique_session=fabrique_session_audit or (lambda: obtenir_fabrique_session()()),
    )

    @application.exception_handler(Exception)
    async def erreur_inattendue(request: Request, exc: Exception) -> JSONResponse:
        logger.error("erreur_inattendue methode=%s chemin=%s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Erreur interne du serveur."})

    # Routes
    application.include_router(router)

    # Santé
    application.include_router(routeur_sante)

    return application


app = creer_application()


def lancer() -> None:
    """Point d'entrée `masarnia-api` : HOTE et PORT viennent de l'environnement."""

    # log_config=None : uvicorn garde le format posé par configurer_logging()
    uvicorn.run(
        "masarnia.main:app",
        host=parametres_application.hote,
        port=parametres_application.port,
        log_config=None,
    )


if __name__ == "__main__":
    lancer()
