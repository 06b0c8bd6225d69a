from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie
from masarnia.domaine.services.etiquettes import LotSalaisonIntrouvableEtiquette, ServiceEtiquettes


routeur_etiquettes = APIRouter(
    prefix="/labels",
    tags=["etiquettes"],
    dependencies=[Depends(verifier_authentifie)],
)


@routeur_etiquettes.get(
    "/curing/{lot_id}",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def etiquette_salaison(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Response:
    """Étiquette à coller sur le bac du lot de salaison."""

    try:
        pdf = await ServiceEtiquettes(session).etiquette_salaison(lot_id)
    except LotSalaisonIntrouvableEtiquette as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return Response(content=pdf, media_type="application/pdf")
