from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie
from masarnia.domaine.services.rapports_pdf import PeriodeInvalide, ServiceRapportsPDF


routeur_rapports = APIRouter(
    prefix="/reports",
    tags=["rapports"],
    dependencies=[Depends(verifier_authentifie)],
)

_REPONSE_PDF = {200: {"content": {"application/pdf": {}}}}


def _pdf(contenu: bytes, nom: str, du: date, au: date) -> Response:
    return Response(
        content=contenu,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{nom}_{du.isoformat()}_{au.isoformat()}.pdf"'},
    )


@routeur_rapports.get("/temperature", response_class=Response, responses=_REPONSE_PDF)
async def rapport_temperatures(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    """Registre des relevés de température de la période."""

    try:
        contenu = await ServiceRapportsPDF(session).rapport_temperatures(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "temperatures", du, au)


@routeur_rapports.get("/audits", response_class=Response, responses=_REPONSE_PDF)
async def rapport_audits(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    try:
        contenu = await ServiceRapportsPDF(session).rapport_audits(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "audits", du, au)


@routeur_rapports.get("/production", response_class=Response, responses=_REPONSE_PDF)
async def rapport_production(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    try:
        contenu = await ServiceRapportsPDF(session).rapport_production(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "production", du, au)


@routeur_rapports.get("/curing", response_class=Response, responses=_REPONSE_PDF)
async def rapport_salaison(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    try:
        contenu = await ServiceRapportsPDF(session).rapport_salaison(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "salaison", du, au)


@routeur_rapports.get("/receptions", response_class=Response, responses=_REPONSE_PDF)
async def rapport_receptions(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    """Registre de réception des matières premières (conformité constatée au quai)."""

    try:
        contenu = await ServiceRapportsPDF(session).rapport_receptions(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "receptions", du, au)


@routeur_rapports.get("/cleaning", response_class=Response, responses=_REPONSE_PDF)
async def rapport_nettoyage(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    try:
        contenu = await ServiceRapportsPDF(session).rapport_nettoyage(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "nettoyage", du, au)


@routeur_rapports.get("/pest-control", response_class=Response, responses=_REPONSE_PDF)
async def rapport_nuisibles(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    try:
        contenu = await ServiceRapportsPDF(session).rapport_nuisibles(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "nuisibles", du, au)


@routeur_rapports.get("/waste", response_class=Response, responses=_REPONSE_PDF)
async def rapport_dechets(
    du: date = Query(...),
    au: date = Query(...),
    session: AsyncSession = Depends(fournir_session),
) -> Response:
    try:
        contenu = await ServiceRapportsPDF(session).rapport_dechets(du=du, au=au)
    except PeriodeInvalide as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _pdf(contenu, "dechets", du, au)


@routeur_rapports.get("/haccp-plan", response_class=Response, responses=_REPONSE_PDF)
async def rapport_plan_haccp(session: AsyncSession = Depends(fournir_session)) -> Response:
    """Plan HACCP en vigueur : analyse des dangers et CCP actifs."""

    contenu = await ServiceRapportsPDF(session).rapport_plan_haccp()
    return Response(
        content=contenu,
        media_type="application/pdf",
        headers={"Content-Disposition": 'inline; filename="plan_haccp.pdf"'},
    )
