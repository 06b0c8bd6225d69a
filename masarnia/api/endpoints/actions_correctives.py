from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.haccp import ActionCorrectiveCreate, ActionCorrectiveOut, ActionCorrectiveUpdate
from masarnia.domaine.enums.types import (
    OrigineActionCorrective,
    PrioriteActionCorrective,
    StatutActionCorrective,
)
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.haccp import ActionCorrective


routeur_actions_correctives = APIRouter(
    prefix="/corrective-actions",
    tags=["actions_correctives"],
    dependencies=[Depends(verifier_authentifie)],
)

_RANG_PRIORITE = case(
    (ActionCorrective.priorite == PrioriteActionCorrective.CRITICAL, 0),
    (ActionCorrective.priorite == PrioriteActionCorrective.HIGH, 1),
    (ActionCorrective.priorite == PrioriteActionCorrective.MEDIUM, 2),
    else_=3,
)


async def _charger_action(session: AsyncSession, action_id: UUID) -> ActionCorrective:
    action = await session.get(ActionCorrective, action_id)
    if action is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Action corrective introuvable.")
    return action


@routeur_actions_correctives.get("", response_model=list[ActionCorrectiveOut])
async def lister_actions(
    session: AsyncSession = Depends(fournir_session),
    statut: StatutActionCorrective | None = Query(default=None),
    priorite: PrioriteActionCorrective | None = Query(default=None),
    origine: OrigineActionCorrective | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
) -> list[ActionCorrective]:
    """Les plus urgentes d'abord, puis les plus récentes."""

    stmt = select(ActionCorrective).order_by(_RANG_PRIORITE, ActionCorrective.cree_le.desc()).limit(limit)
    if statut is not None:
        stmt = stmt.where(ActionCorrective.statut == statut)
    if priorite is not None:
        stmt = stmt.where(ActionCorrective.priorite == priorite)
    if origine is not None:
        stmt = stmt.where(ActionCorrective.origine == origine)
    return list((await session.execute(stmt)).scalars().all())


@routeur_actions_correctives.get("/{action_id}", response_model=ActionCorrectiveOut)
async def lire_action(action_id: UUID, session: AsyncSession = Depends(fournir_session)) -> ActionCorrective:
    return await _charger_action(session, action_id)


@routeur_actions_correctives.post("", response_model=ActionCorrectiveOut, status_code=status.HTTP_201_CREATED)
async def creer_action(
    requete: ActionCorrectiveCreate,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> ActionCorrective:
    action = ActionCorrective(
        **requete.model_dump(),
        statut=StatutActionCorrective.OPEN,
        origine=OrigineActionCorrective.MANUAL,
        utilisateur_id=utilisateur.id,
    )
    session.add(action)
    await session.commit()
    return action


@routeur_actions_correctives.patch("/{action_id}", response_model=ActionCorrectiveOut)
async def maj_action(
    action_id: UUID,
    requete: ActionCorrectiveUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> ActionCorrective:
    action = await _charger_action(session, action_id)

    modifications = requete.model_dump(exclude_unset=True)
    appliquer_modifications(action, modifications)

    nouveau_statut = modifications.get("statut")
    if nouveau_statut == StatutActionCorrective.COMPLETED and action.realisee_le is None:
        action.realisee_le = datetime.now(timezone.utc)
    elif nouveau_statut is not None and nouveau_statut != StatutActionCorrective.COMPLETED:
        action.realisee_le = None

    await session.commit()
    return action


@routeur_actions_correctives.delete("/{action_id}")
async def supprimer_action(action_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    action = await _charger_action(session, action_id)
    await session.delete(action)
    await session.commit()
    return {"statut": "ok"}
