from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances_auth import _extraire_bearer
from masarnia.core.configuration import parametres_application
from masarnia.core.securite import decoder_token_acces
from masarnia.domaine.modeles.audit import JournalAudit


logger = logging.getLogger(__name__)

_ACTIONS_PAR_METHODE = {
    "GET": "READ",
    "HEAD": "READ",
    "POST": "CREATE",
    "PUT": "UPDATE",
    "PATCH": "UPDATE",
    "DELETE": "DELETE",
}

_CHAMPS_MASQUES = {"mot_de_passe", "password"}


def _ressource_depuis_chemin(chemin: str) -> str:
    """/api/temperature/readings -> temperature"""

    segments = [s for s in chemin.split("/") if s]
    if segments and segments[0] == "api":
        segments = segments[1:]
    return segments[0] if segments else "racine"


def _masquer_secrets(donnees: Any) -> Any:
    if isinstance(donnees, dict):
        return {k: ("***" if k in _CHAMPS_MASQUES else _masquer_secrets(v)) for k, v in donnees.items()}
    if isinstance(donnees, list):
        return [_masquer_secrets(v) for v in donnees]
    return donnees


class MiddlewareAudit(BaseHTTPMiddleware):
    """Middleware d’audit automatique.

    - Journalise chaque requête (hors /health) en append-only.
    - Associe l'utilisateur si un Bearer token valide est fourni.

    Best effort : un échec d'écriture du journal est loggé, la réponse part quand même.
    """

    def __init__(self, app: Any, *, fabrique_session: Callable[[], AsyncSession]):
        super().__init__(app)
        self._fabrique_session = fabrique_session

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        # Le corps est lu avant call_next : Starlette le rejoue ensuite pour la route.
        donnees = await self._lire_corps(request)

        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            await self._audit(request, response, donnees)

    @staticmethod
    async def _lire_corps(request: Request) -> Any:
        if request.method.upper() in {"GET", "HEAD"}:
            return None
        corps = await request.body()
        if not corps or len(corps) > 10_000:
            return None
        try:
            return _masquer_secrets(json.loads(corps.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return {"brut": corps[:200].decode("utf-8", errors="replace")}

    @staticmethod
    def _utilisateur_id(request: Request) -> UUID | None:
        token = _extraire_bearer(request.headers.get("authorization"))
        if not token:
            return None
        try:
            payload = decoder_token_acces(token, secret=parametres_application.jwt_secret)
            return UUID(str(payload.get("sub")))
        except (jwt.PyJWTError, ValueError):
            return None

    async def _audit(self, request: Request, response: Response | None, donnees: Any) -> None:
        methode = request.method.upper()
        entree = JournalAudit(
            utilisateur_id=self._utilisateur_id(request),
            cree_le=datetime.now(tz=timezone.utc),
            action=_ACTIONS_PAR_METHODE.get(methode, methode),
            ressource=_ressource_depuis_chemin(request.url.path),
            methode_http=methode,
            chemin=str(request.url.path)[:300],
            statut_http=(response.status_code if response is not None else None),
            donnees=donnees if isinstance(donnees, dict) else ({"corps": donnees} if donnees is not None else None),
            ip=(request.client.host if request.client else None),
            user_agent=request.headers.get("user-agent"),
        )

        try:
            async with self._fabrique_session() as session:
                session.add(entree)
                await session.commit()
        except SQLAlchemyError:
            logger.warning("journal_audit_echec chemin=%s methode=%s", request.url.path, methode, exc_info=True)
