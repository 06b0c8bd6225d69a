from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant
from masarnia.api.schemas.auth import ReponseLogin, RequeteInscription, RequeteLogin, UtilisateurLecture
from masarnia.core.configuration import parametres_application
from masarnia.core.securite import (
    MESSAGE_MOT_DE_PASSE_TROP_LONG,
    creer_token_acces,
    hasher_mot_de_passe,
    mot_de_passe_trop_long,
    verifier_mot_de_passe,
)
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur


logger = logging.getLogger(__name__)

routeur_auth = APIRouter(prefix="/auth", tags=["auth"])


def _reponse_login(utilisateur: Utilisateur) -> ReponseLogin:
    token = creer_token_acces(
        secret=parametres_application.jwt_secret,
        sujet=str(utilisateur.id),
        duree_minutes=parametres_application.jwt_duree_minutes,
        role=utilisateur.role,
    )
    return ReponseLogin(token_acces=token, utilisateur=UtilisateurLecture.model_validate(utilisateur))


@routeur_auth.get("/me", response_model=UtilisateurLecture)
async def me(utilisateur: Utilisateur = Depends(fournir_utilisateur_courant)) -> Utilisateur:
    """Utilisateur courant, sans le hash du mot de passe."""

    return utilisateur


@routeur_auth.post("/login", response_model=ReponseLogin)
async def login(requete: RequeteLogin, session: AsyncSession = Depends(fournir_session)) -> ReponseLogin:
    res = await session.execute(select(Utilisateur).where(Utilisateur.email == requete.email.strip().lower()))
    utilisateur = res.scalar_one_or_none()
    if utilisateur is None or not utilisateur.actif:
        logger.info("login_refuse email=%s", requete.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Identifiants invalides.")

    valide, nouveau_hash = verifier_mot_de_passe(requete.mot_de_passe, utilisateur.mot_de_passe_hash)
    if not valide:
        logger.info("login_refuse email=%s", requete.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Identifiants invalides.")
    if nouveau_hash is not None:
        utilisateur.mot_de_passe_hash = nouveau_hash

    utilisateur.dernier_login_le = datetime.now(tz=timezone.utc)
    await session.commit()

    logger.info("login_ok utilisateur_id=%s role=%s", utilisateur.id, utilisateur.role.value)
    return _reponse_login(utilisateur)


@routeur_auth.post("/register", response_model=ReponseLogin, status_code=status.HTTP_201_CREATED)
async def register(requete: RequeteInscription, session: AsyncSession = Depends(fournir_session)) -> ReponseLogin:
    """Inscription libre : toujours au rôle EMPLOYEE (les rôles se gèrent via /users)."""

    email = requete.email.strip().lower()
    if mot_de_passe_trop_long(requete.mot_de_passe):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MESSAGE_MOT_DE_PASSE_TROP_LONG)
    existe = await session.execute(select(Utilisateur.id).where(Utilisateur.email == email))
    if existe.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email déjà utilisé.")

    utilisateur = Utilisateur(
        email=email,
        nom=requete.nom,
        mot_de_passe_hash=hasher_mot_de_passe(requete.mot_de_passe),
        role=RoleUtilisateur.EMPLOYEE,
        actif=True,
    )
    session.add(utilisateur)
    await session.commit()

    logger.info("inscription utilisateur_id=%s", utilisateur.id)
    return _reponse_login(utilisateur)
