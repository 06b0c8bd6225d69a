from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_stock, fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.receptions import ReceptionMatierePremiereOut
from masarnia.api.schemas.salaison import (
    DeductionSelOut,
    LotSalaisonDisponibleOut,
    LotSalaisonOut,
    LotSalaisonUpdate,
    PrelevementOut,
    ReponseCreationLotSalaison,
    RequeteCreationLotSalaison,
    RequeteTerminerLotSalaison,
)
from masarnia.core.configuration import parametres_application
from masarnia.domaine.enums.types import PolitiqueStockInsuffisant, StatutLotSalaison
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.production import LigneMatiereLot
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.services.salaison import (
    DonneesInvalidesSalaison,
    LotSalaisonDisponible,
    LotSalaisonIntrouvable,
    ServiceSalaison,
    TransitionStatutInterditeSalaison,
)
from masarnia.domaine.services.stock_fifo import ResultatDeduction, StockInsuffisant


routeur_salaison = APIRouter(
    prefix="/curing",
    tags=["salaison"],
    dependencies=[Depends(verifier_authentifie)],
)


def _service(session: AsyncSession, politique_stock: PolitiqueStockInsuffisant) -> ServiceSalaison:
    return ServiceSalaison(
        session,
        politique_stock=politique_stock,
        motif_sel_nitrite=parametres_application.motif_sel_nitrite,
        duree_defaut_jours=parametres_application.duree_salaison_defaut_jours,
    )


def _deduction_out(deduction: ResultatDeduction | None) -> DeductionSelOut | None:
    if deduction is None:
        return None
    return DeductionSelOut(
        materiau_id=deduction.materiau_id,
        quantite_demandee=deduction.quantite_demandee,
        quantite_deduite=deduction.quantite_deduite,
        complete=deduction.complete,
        prelevements=[
            PrelevementOut(reception_materiau_id=p.reception_materiau_id, quantite=p.quantite)
            for p in deduction.prelevements
        ],
    )


def _disponible_out(disponible: LotSalaisonDisponible) -> LotSalaisonDisponibleOut:
    return LotSalaisonDisponibleOut(
        lot=LotSalaisonOut.model_validate(disponible.lot),
        quantite_utilisee=disponible.quantite_utilisee,
        quantite_disponible=disponible.quantite_disponible,
    )


async def _charger_lot(session: AsyncSession, lot_id: UUID) -> LotSalaison:
    lot = await session.get(LotSalaison, lot_id)
    if lot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lot de salaison introuvable.")
    return lot


@routeur_salaison.get("", response_model=list[LotSalaisonOut])
async def lister_lots(
    session: AsyncSession = Depends(fournir_session),
    statut: StatutLotSalaison | None = Query(default=None),
    limit: int = Query(50, ge=1, le=500),
) -> list[LotSalaison]:
    stmt = select(LotSalaison).order_by(LotSalaison.date_debut.desc(), LotSalaison.cree_le.desc()).limit(limit)
    if statut is not None:
        stmt = stmt.where(LotSalaison.statut == statut)
    return list((await session.execute(stmt)).scalars().all())


# Routes fixes déclarées avant /{lot_id}.
@routeur_salaison.get("/completed", response_model=list[LotSalaisonDisponibleOut])
async def lots_termines_disponibles(session: AsyncSession = Depends(fournir_session)) -> list[LotSalaisonDisponibleOut]:
    """Lots terminés dont il reste une quantité à utiliser en production."""

    disponibles = await _service(session, PolitiqueStockInsuffisant.IGNORE).lots_termines_disponibles()
    return [_disponible_out(d) for d in disponibles]


@routeur_salaison.get("/available/meat", response_model=list[ReceptionMatierePremiereOut])
async def viande_disponible(
    session: AsyncSession = Depends(fournir_session),
    jours: int | None = Query(default=None, ge=1, le=365),
) -> list[ReceptionMatierePremiere]:
    fenetre = jours if jours is not None else parametres_application.fenetre_viande_disponible_jours
    return await _service(session, PolitiqueStockInsuffisant.IGNORE).viande_disponible(fenetre_jours=fenetre)


@routeur_salaison.get("/{lot_id}", response_model=LotSalaisonOut)
async def lire_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> LotSalaison:
    return await _charger_lot(session, lot_id)


@routeur_salaison.post("", response_model=ReponseCreationLotSalaison, status_code=status.HTTP_201_CREATED)
async def creer_lot(
    requete: RequeteCreationLotSalaison,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    politique_stock: PolitiqueStockInsuffisant = Depends(fournir_politique_stock),
    session: AsyncSession = Depends(fournir_session),
) -> ReponseCreationLotSalaison:
    service = _service(session, politique_stock)

    try:
        lot = await service.creer_lot(
            nom_produit=requete.nom_produit,
            quantite=requete.quantite,
            date_debut=requete.date_debut or date.today(),
            unite=requete.unite,
            methode=requete.methode,
            reception_id=requete.reception_id,
            description_viande=requete.description_viande,
            pourcentage_sel_nitrite=requete.pourcentage_sel_nitrite,
            saumure_eau=requete.saumure_eau,
            saumure_sel=requete.saumure_sel,
            saumure_maggi=requete.saumure_maggi,
            saumure_sucre=requete.saumure_sucre,
            duree_prevue_jours=requete.duree_prevue_jours,
            temperature=requete.temperature,
            notes=requete.notes,
            utilisateur_id=utilisateur.id,
        )
    except DonneesInvalidesSalaison as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StockInsuffisant as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return ReponseCreationLotSalaison(
        lot=LotSalaisonOut.model_validate(lot),
        deduction_sel=_deduction_out(service.derniere_deduction),
    )


@routeur_salaison.patch("/{lot_id}", response_model=LotSalaisonOut)
async def maj_lot(
    lot_id: UUID,
    requete: LotSalaisonUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> LotSalaison:
    lot = await _charger_lot(session, lot_id)
    if lot.statut != StatutLotSalaison.IN_PROGRESS:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Seul un lot en cours peut être modifié.")

    modifications = requete.model_dump(exclude_unset=True)
    date_fin_prevue = modifications.get("date_fin_prevue")
    if date_fin_prevue is not None and date_fin_prevue < lot.date_debut:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La fin prévue ne peut précéder le début de la salaison.",
        )
    appliquer_modifications(lot, modifications)
    await session.commit()
    return lot


@routeur_salaison.post("/{lot_id}/complete", response_model=LotSalaisonOut)
async def terminer_lot(
    lot_id: UUID,
    requete: RequeteTerminerLotSalaison | None = None,
    session: AsyncSession = Depends(fournir_session),
) -> LotSalaison:
    service = _service(session, PolitiqueStockInsuffisant.IGNORE)

    try:
        return await service.terminer_lot(
            lot_id=lot_id,
            date_fin_reelle=requete.date_fin_reelle if requete else None,
            notes=requete.notes if requete else None,
        )
    except LotSalaisonIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransitionStatutInterditeSalaison as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@routeur_salaison.post("/{lot_id}/cancel", response_model=LotSalaisonOut)
async def annuler_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> LotSalaison:
    service = _service(session, PolitiqueStockInsuffisant.IGNORE)

    try:
        return await service.annuler_lot(lot_id=lot_id)
    except LotSalaisonIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransitionStatutInterditeSalaison as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@routeur_salaison.delete("/{lot_id}")
async def supprimer_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    lot = await _charger_lot(session, lot_id)

    utilise = await session.execute(
        select(func.count(LigneMatiereLot.id)).where(LigneMatiereLot.lot_salaison_id == lot.id)
    )
    if int(utilise.scalar_one()) > 0:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Lot de salaison utilisé en production : suppression impossible.",
        )

    await session.delete(lot)
    await session.commit()
    return {"statut": "ok"}
