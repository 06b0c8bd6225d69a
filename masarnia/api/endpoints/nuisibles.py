from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_conformite, fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.hygiene import (
    ControleNuisiblesOut,
    PointNuisiblesCreate,
    PointNuisiblesOut,
    PointNuisiblesUpdate,
    RequeteControleNuisibles,
)
from masarnia.domaine.enums.types import StatutControleNuisibles
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.hygiene import ControleNuisibles, PointNuisibles
from masarnia.domaine.services.conformite import PolitiqueConformite
from masarnia.domaine.services.nuisibles import PointNuisiblesIntrouvable, ServiceNuisibles


routeur_nuisibles = APIRouter(
    prefix="/pest-control",
    tags=["nuisibles"],
    dependencies=[Depends(verifier_authentifie)],
)


async def _charger_point(session: AsyncSession, point_id: UUID) -> PointNuisibles:
    point = await session.get(PointNuisibles, point_id)
    if point is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Point de contrôle introuvable.")
    return point


@routeur_nuisibles.get("/points", response_model=list[PointNuisiblesOut])
async def lister_points(session: AsyncSession = Depends(fournir_session)) -> list[PointNuisibles]:
    res = await session.execute(select(PointNuisibles).order_by(PointNuisibles.nom.asc()))
    return list(res.scalars().all())


@routeur_nuisibles.post("/points", response_model=PointNuisiblesOut, status_code=status.HTTP_201_CREATED)
async def creer_point(requete: PointNuisiblesCreate, session: AsyncSession = Depends(fournir_session)) -> PointNuisibles:
    point = PointNuisibles(**requete.model_dump())
    session.add(point)
    await session.commit()
    return point


@routeur_nuisibles.patch("/points/{point_id}", response_model=PointNuisiblesOut)
async def maj_point(
    point_id: UUID,
    requete: PointNuisiblesUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> PointNuisibles:
    point = await _charger_point(session, point_id)
    appliquer_modifications(point, requete.model_dump(exclude_unset=True))
    await session.commit()
    return point


@routeur_nuisibles.delete("/points/{point_id}")
async def supprimer_point(point_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    point = await _charger_point(session, point_id)
    await session.delete(point)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Point avec historique de contrôles : désactivez-le plutôt que de le supprimer.",
        ) from e
    return {"statut": "ok"}


@routeur_nuisibles.get("/checks", response_model=list[ControleNuisiblesOut])
async def lister_controles(
    session: AsyncSession = Depends(fournir_session),
    point_nuisibles_id: UUID | None = Query(default=None),
    statut: StatutControleNuisibles | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
) -> list[ControleNuisibles]:
    stmt = select(ControleNuisibles).order_by(ControleNuisibles.controle_le.desc()).limit(limit)
    if point_nuisibles_id is not None:
        stmt = stmt.where(ControleNuisibles.point_nuisibles_id == point_nuisibles_id)
    if statut is not None:
        stmt = stmt.where(ControleNuisibles.statut == statut)
    return list((await session.execute(stmt)).scalars().all())


@routeur_nuisibles.post("/checks", response_model=ControleNuisiblesOut, status_code=status.HTTP_201_CREATED)
async def creer_controle(
    requete: RequeteControleNuisibles,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    politique: PolitiqueConformite = Depends(fournir_politique_conformite),
    session: AsyncSession = Depends(fournir_session),
) -> ControleNuisibles:
    service = ServiceNuisibles(session, politique=politique)

    try:
        return await service.enregistrer_controle(
            point_nuisibles_id=requete.point_nuisibles_id,
            statut=requete.statut,
            constatations=requete.constatations,
            action_menee=requete.action_menee,
            controle_le=requete.controle_le,
            utilisateur_id=utilisateur.id,
        )
    except PointNuisiblesIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
