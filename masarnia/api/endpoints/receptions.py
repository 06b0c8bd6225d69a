from __future__ import annotations

from datetime import datetime, time, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_conformite, fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.production import LotProductionResumeOut
from masarnia.api.schemas.receptions import (
    ReceptionMatierePremiereOut,
    ReceptionMatierePremiereUpdate,
    RequeteReceptionMatierePremiere,
)
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.decoupe import Decoupe
from masarnia.domaine.modeles.production import LigneMatiereLot, LotProduction
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.services.conformite import PolitiqueConformite
from masarnia.domaine.services.receptions import DonneesInvalidesReception, ServiceReceptions
from masarnia.domaine.services.tracabilite import ServiceTracabilite


routeur_receptions = APIRouter(
    prefix="/receptions",
    tags=["receptions"],
    dependencies=[Depends(verifier_authentifie)],
)


async def _charger_reception(session: AsyncSession, reception_id: UUID) -> ReceptionMatierePremiere:
    reception = await session.get(ReceptionMatierePremiere, reception_id)
    if reception is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Réception introuvable.")
    return reception


@routeur_receptions.get("", response_model=list[ReceptionMatierePremiereOut])
async def lister_receptions(
    session: AsyncSession = Depends(fournir_session),
    limit: int = Query(50, ge=1, le=500),
    conforme: bool | None = Query(default=None),
) -> list[ReceptionMatierePremiere]:
    stmt = select(ReceptionMatierePremiere).order_by(ReceptionMatierePremiere.recue_le.desc()).limit(limit)
    if conforme is not None:
        stmt = stmt.where(ReceptionMatierePremiere.conforme.is_(conforme))
    return list((await session.execute(stmt)).scalars().all())


@routeur_receptions.get("/{reception_id}", response_model=ReceptionMatierePremiereOut)
async def lire_reception(reception_id: UUID, session: AsyncSession = Depends(fournir_session)) -> ReceptionMatierePremiere:
    return await _charger_reception(session, reception_id)


@routeur_receptions.get("/{reception_id}/batches", response_model=list[LotProductionResumeOut])
async def lots_utilisant_reception(
    reception_id: UUID,
    session: AsyncSession = Depends(fournir_session),
) -> list[LotProduction]:
    """Traçabilité descendante : lots de production issus de cette réception."""

    await _charger_reception(session, reception_id)
    return await ServiceTracabilite(session).lots_utilisant_reception(reception_id)


@routeur_receptions.post("", response_model=ReceptionMatierePremiereOut, status_code=status.HTTP_201_CREATED)
async def creer_reception(
    requete: RequeteReceptionMatierePremiere,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    politique: PolitiqueConformite = Depends(fournir_politique_conformite),
    session: AsyncSession = Depends(fournir_session),
) -> ReceptionMatierePremiere:
    service = ServiceReceptions(session, politique=politique)

    try:
        return await service.receptionner_matiere_premiere(
            matiere_premiere_id=requete.matiere_premiere_id,
            fournisseur_id=requete.fournisseur_id,
            numero_lot=requete.numero_lot,
            quantite=requete.quantite,
            unite=requete.unite,
            date_peremption=requete.date_peremption,
            temperature=requete.temperature,
            conforme=requete.conforme,
            vehicule_propre=requete.vehicule_propre,
            temperature_vehicule=requete.temperature_vehicule,
            emballage_intact=requete.emballage_intact,
            documents_complets=requete.documents_complets,
            numero_document=requete.numero_document,
            notes=requete.notes,
            recue_le=requete.moment_reception(),
            utilisateur_id=utilisateur.id,
        )
    except DonneesInvalidesReception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@routeur_receptions.patch("/{reception_id}", response_model=ReceptionMatierePremiereOut)
async def maj_reception(
    reception_id: UUID,
    requete: ReceptionMatierePremiereUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> ReceptionMatierePremiere:
    """Correction de saisie. La conformité reste celle constatée à la réception."""

    reception = await _charger_reception(session, reception_id)

    modifications = requete.model_dump(exclude_unset=True)
    date_reception = modifications.pop("date_reception", None)
    heure_reception = modifications.pop("heure_reception", None)
    appliquer_modifications(reception, modifications)
    if date_reception is not None:
        reception.recue_le = datetime.combine(date_reception, heure_reception or time(12, 0), tzinfo=timezone.utc)

    await session.commit()
    return reception


@routeur_receptions.delete("/{reception_id}")
async def supprimer_reception(reception_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    reception = await _charger_reception(session, reception_id)

    usages = [
        select(func.count(LotSalaison.id)).where(LotSalaison.reception_id == reception.id),
        select(func.count(LigneMatiereLot.id)).where(LigneMatiereLot.reception_id == reception.id),
        select(func.count(Decoupe.id)).where(Decoupe.reception_id == reception.id),
    ]
    for stmt in usages:
        if int((await session.execute(stmt)).scalar_one()) > 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Réception utilisée en salaison, découpe ou production : suppression impossible.",
            )

    await session.delete(reception)
    await session.commit()
    return {"statut": "ok"}
