from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie
from masarnia.api.schemas.tableau_de_bord import AlerteOut, PointGraphiqueOut, StatistiquesOut
from masarnia.domaine.services.tableau_de_bord import (
    Alerte,
    PointGraphique,
    ServiceTableauDeBord,
    StatistiquesTableauDeBord,
)


routeur_tableau_de_bord = APIRouter(
    prefix="/dashboard",
    tags=["tableau_de_bord"],
    dependencies=[Depends(verifier_authentifie)],
)


@routeur_tableau_de_bord.get("/stats", response_model=StatistiquesOut)
async def statistiques(session: AsyncSession = Depends(fournir_session)) -> StatistiquesTableauDeBord:
    return await ServiceTableauDeBord(session).statistiques()


@routeur_tableau_de_bord.get("/alerts", response_model=list[AlerteOut])
async def alertes(
    session: AsyncSession = Depends(fournir_session),
    limite: int = Query(10, ge=1, le=100),
) -> list[Alerte]:
    return await ServiceTableauDeBord(session).alertes(limite=limite)


@routeur_tableau_de_bord.get("/temperature-chart", response_model=dict[str, list[PointGraphiqueOut]])
async def graphique_temperatures(
    session: AsyncSession = Depends(fournir_session),
    jours: int = Query(7, ge=1, le=90),
) -> dict[str, list[PointGraphique]]:
    """Moyenne journalière par point de mesure."""

    return await ServiceTableauDeBord(session).graphique_temperatures(jours=jours)
