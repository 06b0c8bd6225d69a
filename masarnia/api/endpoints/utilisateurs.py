from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_roles_requis
from masarnia.api.schemas.auth import UtilisateurCreation, UtilisateurLecture, UtilisateurMiseAJour
from masarnia.core.securite import MESSAGE_MOT_DE_PASSE_TROP_LONG, hasher_mot_de_passe, mot_de_passe_trop_long
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur


routeur_utilisateurs = APIRouter(
    prefix="/users",
    tags=["utilisateurs"],
    dependencies=[Depends(verifier_roles_requis(RoleUtilisateur.ADMIN))],
)


async def _charger_utilisateur(session: AsyncSession, utilisateur_id: UUID) -> Utilisateur:
    utilisateur = await session.get(Utilisateur, utilisateur_id)
    if utilisateur is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur introuvable.")
    return utilisateur


@routeur_utilisateurs.get("", response_model=list[UtilisateurLecture])
async def lister_utilisateurs(session: AsyncSession = Depends(fournir_session)) -> list[Utilisateur]:
    res = await session.execute(select(Utilisateur).order_by(Utilisateur.email.asc()))
    return list(res.scalars().all())


@routeur_utilisateurs.get("/{utilisateur_id}", response_model=UtilisateurLecture)
async def lire_utilisateur(utilisateur_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Utilisateur:
    return await _charger_utilisateur(session, utilisateur_id)


@routeur_utilisateurs.post("", response_model=UtilisateurLecture, status_code=status.HTTP_201_CREATED)
async def creer_utilisateur(
    requete: UtilisateurCreation,
    session: AsyncSession = Depends(fournir_session),
) -> Utilisateur:
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
        role=requete.role,
        actif=True,
    )
    session.add(utilisateur)
    await session.commit()
    return utilisateur


@routeur_utilisateurs.patch("/{utilisateur_id}", response_model=UtilisateurLecture)
async def maj_utilisateur(
    utilisateur_id: UUID,
    requete: UtilisateurMiseAJour,
    session: AsyncSession = Depends(fournir_session),
) -> Utilisateur:
    utilisateur = await _charger_utilisateur(session, utilisateur_id)

    if requete.nom is not None:
        utilisateur.nom = requete.nom
    if requete.role is not None:
        utilisateur.role = requete.role
    if requete.actif is not None:
        utilisateur.actif = requete.actif
    if requete.mot_de_passe is not None:
        if mot_de_passe_trop_long(requete.mot_de_passe):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MESSAGE_MOT_DE_PASSE_TROP_LONG)
        utilisateur.mot_de_passe_hash = hasher_mot_de_passe(requete.mot_de_passe)

    await session.commit()
    return utilisateur


@routeur_utilisateurs.delete("/{utilisateur_id}", status_code=status.HTTP_200_OK)
async def desactiver_utilisateur(
    utilisateur_id: UUID,
    courant: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> dict[str, str]:
    if utilisateur_id == courant.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Impossible de se désactiver soi-même.")

    utilisateur = await _charger_utilisateur(session, utilisateur_id)

    # Désactivation : les enregistrements HACCP gardent leur auteur.
    utilisateur.actif = False
    await session.commit()
    return {"statut": "ok"}
