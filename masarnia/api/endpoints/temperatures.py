from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_conformite, fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.hygiene import (
    PointTemperatureCreate,
    PointTemperatureOut,
    PointTemperatureUpdate,
    ReleveTemperatureOut,
    RequeteReleveTemperature,
    TendanceTemperatureOut,
)
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.hygiene import PointTemperature, ReleveTemperature
from masarnia.domaine.services.conformite import PolitiqueConformite
from masarnia.domaine.services.temperatures import (
    PointTemperatureIntrouvable,
    ServiceTemperatures,
    TendanceJournaliere,
)


routeur_temperatures = APIRouter(
    prefix="/temperature",
    tags=["temperatures"],
    dependencies=[Depends(verifier_authentifie)],
)


async def _charger_point(session: AsyncSession, point_id: UUID) -> PointTemperature:
    point = await session.get(PointTemperature, point_id)
    if point is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Point de mesure introuvable.")
    return point


# ===== Points de mesure =====


@routeur_temperatures.get("/points", response_model=list[PointTemperatureOut])
async def lister_points(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[PointTemperature]:
    stmt = select(PointTemperature).order_by(PointTemperature.nom.asc())
    if actif is not None:
        stmt = stmt.where(PointTemperature.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_temperatures.post("/points", response_model=PointTemperatureOut, status_code=status.HTTP_201_CREATED)
async def creer_point(
    requete: PointTemperatureCreate,
    session: AsyncSession = Depends(fournir_session),
) -> PointTemperature:
    point = PointTemperature(**requete.model_dump())
    session.add(point)
    await session.commit()
    return point


@routeur_temperatures.patch("/points/{point_id}", response_model=PointTemperatureOut)
async def maj_point(
    point_id: UUID,
    requete: PointTemperatureUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> PointTemperature:
    point = await _charger_point(session, point_id)
    appliquer_modifications(point, requete.model_dump(exclude_unset=True))
    if point.temperature_min > point.temperature_max:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="temperature_min doit être <= temperature_max.",
        )
    await session.commit()
    return point


@routeur_temperatures.delete("/points/{point_id}")
async def supprimer_point(point_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    point = await _charger_point(session, point_id)
    await session.delete(point)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Point de mesure avec relevés : désactivez-le plutôt que de le supprimer.",
        ) from e
    return {"statut": "ok"}


# ===== Relevés =====


@routeur_temperatures.get("/readings", response_model=list[ReleveTemperatureOut])
async def lister_releves(
    session: AsyncSession = Depends(fournir_session),
    point_temperature_id: UUID | None = Query(default=None),
    du: datetime | None = Query(default=None),
    au: datetime | None = Query(default=None),
    conforme: bool | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
) -> list[ReleveTemperature]:
    stmt = select(ReleveTemperature).order_by(ReleveTemperature.releve_le.desc()).limit(limit)
    if point_temperature_id is not None:
        stmt = stmt.where(ReleveTemperature.point_temperature_id == point_temperature_id)
    if du is not None:
        stmt = stmt.where(ReleveTemperature.releve_le >= du)
    if au is not None:
        stmt = stmt.where(ReleveTemperature.releve_le <= au)
    if conforme is not None:
        stmt = stmt.where(ReleveTemperature.conforme.is_(conforme))
    return list((await session.execute(stmt)).scalars().all())


@routeur_temperatures.post("/readings", response_model=ReleveTemperatureOut, status_code=status.HTTP_201_CREATED)
async def creer_releve(
    requete: RequeteReleveTemperature,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    politique: PolitiqueConformite = Depends(fournir_politique_conformite),
    session: AsyncSession = Depends(fournir_session),
) -> ReleveTemperature:
    service = ServiceTemperatures(session, politique=politique)

    try:
        return await service.enregistrer_releve(
            point_temperature_id=requete.point_temperature_id,
            temperature=requete.temperature,
            notes=requete.notes,
            releve_le=requete.releve_le,
            utilisateur_id=utilisateur.id,
        )
    except PointTemperatureIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@routeur_temperatures.get("/trends", response_model=list[TendanceTemperatureOut])
async def tendances(
    session: AsyncSession = Depends(fournir_session),
    jours: int = Query(7, ge=1, le=366),
    point_temperature_id: UUID | None = Query(default=None),
) -> list[TendanceJournaliere]:
    return await ServiceTemperatures(session).tendances(jours=jours, point_temperature_id=point_temperature_id)
