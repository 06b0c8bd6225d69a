from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.haccp import CCPCreate, CCPOut, CCPUpdate, DangerCreate, DangerOut, DangerUpdate
from masarnia.domaine.enums.types import NiveauRisque, RoleUtilisateur, TypeDanger
from masarnia.domaine.modeles.haccp import CCP, ActionCorrective, Danger


routeur_plan_haccp = APIRouter(
    prefix="/haccp-plan",
    tags=["plan_haccp"],
    dependencies=[Depends(verifier_authentifie)],
)

_responsable = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN, RoleUtilisateur.MANAGER))

_RANG_RISQUE = {NiveauRisque.LOW: 1, NiveauRisque.MEDIUM: 2, NiveauRisque.HIGH: 3}


def significativite(gravite: NiveauRisque, probabilite: NiveauRisque) -> int:
    """Score d'analyse des dangers : gravité x probabilité, de 1 à 9."""

    return _RANG_RISQUE[gravite] * _RANG_RISQUE[probabilite]


async def _charger_ccp(session: AsyncSession, ccp_id: UUID) -> CCP:
    ccp = await session.get(CCP, ccp_id)
    if ccp is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="CCP introuvable.")
    return ccp


async def _charger_danger(session: AsyncSession, danger_id: UUID) -> Danger:
    danger = await session.get(Danger, danger_id)
    if danger is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Danger introuvable.")
    return danger


async def _verifier_ccp_existe(session: AsyncSession, ccp_id: UUID | None) -> None:
    if ccp_id is not None and await session.get(CCP, ccp_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="CCP inconnu.")


# ===== CCP =====


@routeur_plan_haccp.get("/ccps", response_model=list[CCPOut])
async def lister_ccps(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[CCP]:
    stmt = select(CCP).order_by(CCP.code.asc(), CCP.nom.asc())
    if actif is not None:
        stmt = stmt.where(CCP.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_plan_haccp.get("/ccps/{ccp_id}", response_model=CCPOut)
async def lire_ccp(ccp_id: UUID, session: AsyncSession = Depends(fournir_session)) -> CCP:
    return await _charger_ccp(session, ccp_id)


@routeur_plan_haccp.post("/ccps", response_model=CCPOut, status_code=status.HTTP_201_CREATED, dependencies=[_responsable])
async def creer_ccp(requete: CCPCreate, session: AsyncSession = Depends(fournir_session)) -> CCP:
    ccp = CCP(**requete.model_dump())
    session.add(ccp)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Code CCP déjà utilisé.") from e
    return ccp


@routeur_plan_haccp.patch("/ccps/{ccp_id}", response_model=CCPOut, dependencies=[_responsable])
async def maj_ccp(ccp_id: UUID, requete: CCPUpdate, session: AsyncSession = Depends(fournir_session)) -> CCP:
    ccp = await _charger_ccp(session, ccp_id)
    appliquer_modifications(ccp, requete.model_dump(exclude_unset=True))
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Code CCP déjà utilisé.") from e
    return ccp


@routeur_plan_haccp.delete("/ccps/{ccp_id}", dependencies=[_responsable])
async def supprimer_ccp(ccp_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    ccp = await _charger_ccp(session, ccp_id)

    references = [
        select(func.count(Danger.id)).where(Danger.ccp_id == ccp.id),
        select(func.count(ActionCorrective.id)).where(ActionCorrective.ccp_id == ccp.id),
    ]
    for stmt in references:
        if int((await session.execute(stmt)).scalar_one()) > 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="CCP référencé par un danger ou une action corrective : désactivez-le.",
            )

    await session.delete(ccp)
    await session.commit()
    return {"statut": "ok"}


# ===== Dangers =====


@routeur_plan_haccp.get("/hazards", response_model=list[DangerOut])
async def lister_dangers(
    session: AsyncSession = Depends(fournir_session),
    type_danger: TypeDanger | None = Query(default=None),
    ccp_id: UUID | None = Query(default=None),
) -> list[Danger]:
    stmt = select(Danger).order_by(Danger.significativite.desc(), Danger.nom.asc())
    if type_danger is not None:
        stmt = stmt.where(Danger.type_danger == type_danger)
    if ccp_id is not None:
        stmt = stmt.where(Danger.ccp_id == ccp_id)
    return list((await session.execute(stmt)).scalars().all())


@routeur_plan_haccp.get("/hazards/{danger_id}", response_model=DangerOut)
async def lire_danger(danger_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Danger:
    return await _charger_danger(session, danger_id)


@routeur_plan_haccp.post(
    "/hazards", response_model=DangerOut, status_code=status.HTTP_201_CREATED, dependencies=[_responsable]
)
async def creer_danger(requete: DangerCreate, session: AsyncSession = Depends(fournir_session)) -> Danger:
    await _verifier_ccp_existe(session, requete.ccp_id)

    danger = Danger(
        **requete.model_dump(),
        significativite=significativite(requete.gravite, requete.probabilite),
    )
    session.add(danger)
    await session.commit()
    return danger


@routeur_plan_haccp.patch("/hazards/{danger_id}", response_model=DangerOut, dependencies=[_responsable])
async def maj_danger(
    danger_id: UUID,
    requete: DangerUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Danger:
    danger = await _charger_danger(session, danger_id)

    modifications = requete.model_dump(exclude_unset=True)
    if "ccp_id" in modifications:
        await _verifier_ccp_existe(session, modifications["ccp_id"])
    appliquer_modifications(danger, modifications)
    danger.significativite = significativite(danger.gravite, danger.probabilite)

    await session.commit()
    return danger


@routeur_plan_haccp.delete("/hazards/{danger_id}", dependencies=[_responsable])
async def supprimer_danger(danger_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    danger = await _charger_danger(session, danger_id)
    await session.delete(danger)
    await session.commit()
    return {"statut": "ok"}
