from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.registres import (
    FormationCreate,
    FormationOut,
    FormationUpdate,
    ParticipantFormationIn,
)
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.formation import Formation, ParticipantFormation


routeur_formations = APIRouter(
    prefix="/trainings",
    tags=["formations"],
    dependencies=[Depends(verifier_authentifie)],
)

_responsable = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN, RoleUtilisateur.MANAGER))


async def _charger_formation(session: AsyncSession, formation_id: UUID) -> Formation:
    res = await session.execute(
        select(Formation)
        .options(selectinload(Formation.participants))
        .where(Formation.id == formation_id)
        .execution_options(populate_existing=True)
    )
    formation = res.scalar_one_or_none()
    if formation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Formation introuvable.")
    return formation


async def _verifier_utilisateurs(session: AsyncSession, participants: list[ParticipantFormationIn]) -> None:
    for participant in participants:
        if await session.get(Utilisateur, participant.utilisateur_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Utilisateur inconnu : {participant.utilisateur_id}.",
            )


@routeur_formations.get("", response_model=list[FormationOut])
async def lister_formations(
    session: AsyncSession = Depends(fournir_session),
    utilisateur_id: UUID | None = Query(default=None),
) -> list[Formation]:
    stmt = (
        select(Formation)
        .options(selectinload(Formation.participants))
        .order_by(Formation.date_formation.desc())
    )
    if utilisateur_id is not None:
        stmt = stmt.where(Formation.participants.any(ParticipantFormation.utilisateur_id == utilisateur_id))
    return list((await session.execute(stmt)).scalars().all())


@routeur_formations.get("/{formation_id}", response_model=FormationOut)
async def lire_formation(formation_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Formation:
    return await _charger_formation(session, formation_id)


@routeur_formations.post("", response_model=FormationOut, status_code=status.HTTP_201_CREATED, dependencies=[_responsable])
async def creer_formation(requete: FormationCreate, session: AsyncSession = Depends(fournir_session)) -> Formation:
    if len({p.utilisateur_id for p in requete.participants}) != len(requete.participants):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Participant en double.")
    await _verifier_utilisateurs(session, requete.participants)

    formation = Formation(**requete.model_dump(exclude={"participants"}))
    formation.participants = [ParticipantFormation(**p.model_dump()) for p in requete.participants]
    session.add(formation)
    await session.commit()
    return await _charger_formation(session, formation.id)


@routeur_formations.patch("/{formation_id}", response_model=FormationOut, dependencies=[_responsable])
async def maj_formation(
    formation_id: UUID,
    requete: FormationUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Formation:
    formation = await _charger_formation(session, formation_id)
    appliquer_modifications(formation, requete.model_dump(exclude_unset=True))
    await session.commit()
    return formation


@routeur_formations.delete("/{formation_id}", dependencies=[_responsable])
async def supprimer_formation(formation_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    formation = await _charger_formation(session, formation_id)
    await session.delete(formation)
    await session.commit()
    return {"statut": "ok"}


@routeur_formations.post(
    "/{formation_id}/participants",
    response_model=FormationOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[_responsable],
)
async def ajouter_participant(
    formation_id: UUID,
    requete: ParticipantFormationIn,
    session: AsyncSession = Depends(fournir_session),
) -> Formation:
    formation = await _charger_formation(session, formation_id)
    await _verifier_utilisateurs(session, [requete])

    session.add(ParticipantFormation(formation_id=formation.id, **requete.model_dump()))
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Participant déjà inscrit.") from e
    return await _charger_formation(session, formation.id)


@routeur_formations.delete("/{formation_id}/participants/{utilisateur_id}", dependencies=[_responsable])
async def retirer_participant(
    formation_id: UUID,
    utilisateur_id: UUID,
    session: AsyncSession = Depends(fournir_session),
) -> dict[str, str]:
    res = await session.execute(
        select(ParticipantFormation).where(
            ParticipantFormation.formation_id == formation_id,
            ParticipantFormation.utilisateur_id == utilisateur_id,
        )
    )
    participant = res.scalar_one_or_none()
    if participant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant introuvable.")
    await session.delete(participant)
    await session.commit()
    return {"statut": "ok"}
