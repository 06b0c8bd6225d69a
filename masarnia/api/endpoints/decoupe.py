from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.registres import DecoupeCreate, DecoupeOut, DecoupeUpdate, ElementDisponibleOut
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.decoupe import Decoupe, ElementDecoupe
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere


routeur_decoupe = APIRouter(
    prefix="/butchering",
    tags=["decoupe"],
    dependencies=[Depends(verifier_authentifie)],
)

_admin = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN))


async def _charger_decoupe(session: AsyncSession, decoupe_id: UUID) -> Decoupe:
    res = await session.execute(
        select(Decoupe)
        .options(selectinload(Decoupe.elements))
        .where(Decoupe.id == decoupe_id)
        .execution_options(populate_existing=True)
    )
    decoupe = res.scalar_one_or_none()
    if decoupe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Découpe introuvable.")
    return decoupe


async def _verifier_reception(session: AsyncSession, reception_id: UUID | None) -> None:
    if reception_id is not None and await session.get(ReceptionMatierePremiere, reception_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Réception inconnue.")


@routeur_decoupe.get("", response_model=list[DecoupeOut])
async def lister_decoupes(
    session: AsyncSession = Depends(fournir_session),
    reception_id: UUID | None = Query(default=None),
    limit: int = Query(50, ge=1, le=500),
) -> list[Decoupe]:
    stmt = (
        select(Decoupe)
        .options(selectinload(Decoupe.elements))
        .order_by(Decoupe.date_decoupe.desc(), Decoupe.cree_le.desc())
        .limit(limit)
    )
    if reception_id is not None:
        stmt = stmt.where(Decoupe.reception_id == reception_id)
    return list((await session.execute(stmt)).scalars().all())


@routeur_decoupe.get("/elements/available", response_model=list[ElementDisponibleOut])
async def elements_disponibles(session: AsyncSession = Depends(fournir_session)) -> list[ElementDisponibleOut]:
    """Éléments issus des découpes, utilisables comme viande en salaison ou en production."""

    res = await session.execute(
        select(ElementDecoupe, Decoupe)
        .join(Decoupe, Decoupe.id == ElementDecoupe.decoupe_id)
        .order_by(Decoupe.date_decoupe.desc(), ElementDecoupe.nom_element.asc())
    )
    return [
        ElementDisponibleOut(
            id=element.id,
            decoupe_id=decoupe.id,
            numero_lot=decoupe.numero_lot,
            date_decoupe=decoupe.date_decoupe,
            nom_element=element.nom_element,
            quantite=element.quantite,
            destination=element.destination,
        )
        for element, decoupe in res.all()
    ]


@routeur_decoupe.get("/{decoupe_id}", response_model=DecoupeOut)
async def lire_decoupe(decoupe_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Decoupe:
    return await _charger_decoupe(session, decoupe_id)


@routeur_decoupe.post("", response_model=DecoupeOut, status_code=status.HTTP_201_CREATED, dependencies=[_admin])
async def creer_decoupe(requete: DecoupeCreate, session: AsyncSession = Depends(fournir_session)) -> Decoupe:
    await _verifier_reception(session, requete.reception_id)

    decoupe = Decoupe(**requete.model_dump(exclude={"elements"}))
    decoupe.elements = [ElementDecoupe(**e.model_dump()) for e in requete.elements]
    session.add(decoupe)
    await session.commit()
    return await _charger_decoupe(session, decoupe.id)


@routeur_decoupe.patch("/{decoupe_id}", response_model=DecoupeOut, dependencies=[_admin])
async def maj_decoupe(
    decoupe_id: UUID,
    requete: DecoupeUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Decoupe:
    decoupe = await _charger_decoupe(session, decoupe_id)

    modifications = requete.model_dump(exclude_unset=True, exclude={"elements"})
    if "reception_id" in modifications:
        await _verifier_reception(session, modifications["reception_id"])
    appliquer_modifications(decoupe, modifications)
    if requete.elements is not None:
        decoupe.elements = [ElementDecoupe(**e.model_dump()) for e in requete.elements]

    await session.commit()
    return await _charger_decoupe(session, decoupe.id)


@routeur_decoupe.delete("/{decoupe_id}", dependencies=[_admin])
async def supprimer_decoupe(decoupe_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    decoupe = await _charger_decoupe(session, decoupe_id)
    await session.delete(decoupe)
    await session.commit()
    return {"statut": "ok"}
