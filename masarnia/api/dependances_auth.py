from __future__ import annotations

from uuid import UUID

import jwt
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.core.configuration import parametres_application
from masarnia.core.securite import decoder_token_acces
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur


def _extraire_bearer(authorization: str | None) -> str | None:
    if authorization is None:
        return None
    prefix = "bearer "
    if authorization.lower().startswith(prefix):
        return authorization[len(prefix) :].strip()
    return None


async def fournir_utilisateur_courant(
    session: AsyncSession = Depends(fournir_session),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Utilisateur:
    token = _extraire_bearer(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token manquant.")

    try:
        payload = decoder_token_acces(token, secret=parametres_application.jwt_secret)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide.")

    try:
        utilisateur_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide (sub).")

    res = await session.execute(select(Utilisateur).where(Utilisateur.id == utilisateur_id))
    utilisateur = res.scalar_one_or_none()

    # Clôt la transaction de lecture : les services ouvrent la leur avec session.begin().
    await session.commit()

    if utilisateur is None or not utilisateur.actif:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Utilisateur inactif.")

    return utilisateur


def verifier_authentifie(utilisateur: Utilisateur = Depends(fournir_utilisateur_courant)) -> None:
    """Dépendance simple : exige un utilisateur authentifié (pour dependencies=[...])."""

    return None


def verifier_roles_requis(*roles_requis: RoleUtilisateur):
    async def _dep(utilisateur: Utilisateur = Depends(fournir_utilisateur_courant)) -> None:
        if utilisateur.role not in roles_requis:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Accès interdit.")

    return _dep
