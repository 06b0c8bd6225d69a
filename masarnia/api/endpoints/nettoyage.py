from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.hygiene import (
    EnregistrementNettoyageCreate,
    EnregistrementNettoyageOut,
    ZoneNettoyageCreate,
    ZoneNettoyageOut,
    ZoneNettoyageUpdate,
)
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.hygiene import EnregistrementNettoyage, ZoneNettoyage


routeur_nettoyage = APIRouter(
    prefix="/cleaning",
    tags=["nettoyage"],
    dependencies=[Depends(verifier_authentifie)],
)

_admin = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN))


async def _charger_zone(session: AsyncSession, zone_id: UUID) -> ZoneNettoyage:
    zone = await session.get(ZoneNettoyage, zone_id)
    if zone is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Zone de nettoyage introuvable.")
    return zone


async def _charger_enregistrement(session: AsyncSession, enregistrement_id: UUID) -> EnregistrementNettoyage:
    enregistrement = await session.get(EnregistrementNettoyage, enregistrement_id)
    if enregistrement is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enregistrement introuvable.")
    return enregistrement


@routeur_nettoyage.get("/areas", response_model=list[ZoneNettoyageOut])
async def lister_zones(session: AsyncSession = Depends(fournir_session)) -> list[ZoneNettoyage]:
    res = await session.execute(select(ZoneNettoyage).order_by(ZoneNettoyage.nom.asc()))
    return list(res.scalars().all())


@routeur_nettoyage.post("/areas", response_model=ZoneNettoyageOut, status_code=status.HTTP_201_CREATED)
async def creer_zone(requete: ZoneNettoyageCreate, session: AsyncSession = Depends(fournir_session)) -> ZoneNettoyage:
    zone = ZoneNettoyage(**requete.model_dump())
    session.add(zone)
    await session.commit()
    return zone


@routeur_nettoyage.patch("/areas/{zone_id}", response_model=ZoneNettoyageOut)
async def maj_zone(
    zone_id: UUID,
    requete: ZoneNettoyageUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> ZoneNettoyage:
    zone = await _charger_zone(session, zone_id)
    appliquer_modifications(zone, requete.model_dump(exclude_unset=True))
    await session.commit()
    return zone


@routeur_nettoyage.delete("/areas/{zone_id}")
async def supprimer_zone(zone_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    zone = await _charger_zone(session, zone_id)
    await session.delete(zone)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Zone avec historique de nettoyage : désactivez-la plutôt que de la supprimer.",
        ) from e
    return {"statut": "ok"}


@routeur_nettoyage.get("/records", response_model=list[EnregistrementNettoyageOut])
async def lister_enregistrements(
    session: AsyncSession = Depends(fournir_session),
    zone_nettoyage_id: UUID | None = Query(default=None),
    jour: date | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
) -> list[EnregistrementNettoyage]:
    stmt = select(EnregistrementNettoyage).order_by(EnregistrementNettoyage.nettoye_le.desc()).limit(limit)
    if zone_nettoyage_id is not None:
        stmt = stmt.where(EnregistrementNettoyage.zone_nettoyage_id == zone_nettoyage_id)
    if jour is not None:
        debut = datetime.combine(jour, time.min, tzinfo=timezone.utc)
        stmt = stmt.where(EnregistrementNettoyage.nettoye_le >= debut).where(
            EnregistrementNettoyage.nettoye_le < debut + timedelta(days=1)
        )
    return list((await session.execute(stmt)).scalars().all())


@routeur_nettoyage.post("/records", response_model=EnregistrementNettoyageOut, status_code=status.HTTP_201_CREATED)
async def creer_enregistrement(
    requete: EnregistrementNettoyageCreate,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementNettoyage:
    zone = await _charger_zone(session, requete.zone_nettoyage_id)

    enregistrement = EnregistrementNettoyage(
        zone_nettoyage_id=zone.id,
        # Méthode et produits de la zone par défaut.
        methode=requete.methode if requete.methode is not None else zone.methode,
        produits_chimiques=(
            requete.produits_chimiques if requete.produits_chimiques is not None else zone.produits_chimiques
        ),
        verifie=requete.verifie,
        notes=requete.notes,
        nettoye_le=requete.nettoye_le or datetime.now(timezone.utc),
        utilisateur_id=utilisateur.id,
    )
    session.add(enregistrement)
    await session.commit()
    return enregistrement


@routeur_nettoyage.patch("/records/{enregistrement_id}", response_model=EnregistrementNettoyageOut, dependencies=[_admin])
async def maj_enregistrement(
    enregistrement_id: UUID,
    requete: EnregistrementNettoyageCreate,
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementNettoyage:
    enregistrement = await _charger_enregistrement(session, enregistrement_id)
    await _charger_zone(session, requete.zone_nettoyage_id)
    appliquer_modifications(enregistrement, requete.model_dump(exclude_unset=True))
    await session.commit()
    return enregistrement


@routeur_nettoyage.delete("/records/{enregistrement_id}", dependencies=[_admin])
async def supprimer_enregistrement(
    enregistrement_id: UUID,
    session: AsyncSession = Depends(fournir_session),
) -> dict[str, str]:
    enregistrement = await _charger_enregistrement(session, enregistrement_id)
    await session.delete(enregistrement)
    await session.commit()
    return {"statut": "ok"}
