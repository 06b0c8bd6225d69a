from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_conformite, fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.production import (
    ChronologieLotOut,
    LotProductionOut,
    LotProductionResumeOut,
    LotProductionUpdate,
    MatiereDisponibleOut,
    MatieresDisponiblesOut,
    RequeteBloquerLotProduction,
    RequeteCreationLotProduction,
    RequeteTerminerLotProduction,
)
from masarnia.core.configuration import parametres_application
from masarnia.domaine.enums.types import PolitiqueStockInsuffisant, StatutLotProduction, TypeSourceMatiere
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.production import LotProduction
from masarnia.domaine.modeles.receptions import ReceptionMateriau, ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Materiau, MatierePremiere
from masarnia.domaine.services.conformite import PolitiqueConformite
from masarnia.domaine.services.production import (
    DonneesInvalidesProduction,
    LigneMatiereDemandee,
    LotProductionIntrouvable,
    ServiceProduction,
    TransitionStatutInterditeProduction,
)
from masarnia.domaine.services.salaison import ServiceSalaison
from masarnia.domaine.services.tracabilite import ChronologieLot, LotIntrouvableTracabilite, ServiceTracabilite


routeur_production = APIRouter(
    prefix="/production",
    tags=["production"],
    dependencies=[Depends(verifier_authentifie)],
)


async def _lot_complet(session: AsyncSession, lot_id: UUID) -> LotProduction:
    try:
        return await ServiceProduction(session).charger_lot_complet(lot_id)
    except LotProductionIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@routeur_production.get("/batches", response_model=list[LotProductionResumeOut])
async def lister_lots(
    session: AsyncSession = Depends(fournir_session),
    statut: StatutLotProduction | None = Query(default=None),
    produit_id: UUID | None = Query(default=None),
    limit: int = Query(50, ge=1, le=500),
) -> list[LotProduction]:
    stmt = (
        select(LotProduction)
        .order_by(LotProduction.date_production.desc(), LotProduction.cree_le.desc())
        .limit(limit)
    )
    if statut is not None:
        stmt = stmt.where(LotProduction.statut == statut)
    if produit_id is not None:
        stmt = stmt.where(LotProduction.produit_id == produit_id)
    return list((await session.execute(stmt)).scalars().all())


@routeur_production.get("/batches/number/{numero_lot}", response_model=list[LotProductionResumeOut])
async def lots_par_numero(numero_lot: str, session: AsyncSession = Depends(fournir_session)) -> list[LotProduction]:
    """Un même numéro peut exister pour plusieurs produits."""

    res = await session.execute(
        select(LotProduction).where(LotProduction.numero_lot == numero_lot).order_by(LotProduction.cree_le.asc())
    )
    lots = list(res.scalars().all())
    if not lots:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aucun lot pour ce numéro.")
    return lots


@routeur_production.get("/batches/{lot_id}", response_model=LotProductionOut)
async def lire_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> LotProduction:
    return await _lot_complet(session, lot_id)


@routeur_production.post("/batches", response_model=LotProductionOut, status_code=status.HTTP_201_CREATED)
async def creer_lot(
    requete: RequeteCreationLotProduction,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> LotProduction:
    lignes = [
        LigneMatiereDemandee(
            type_source=TypeSourceMatiere(ligne.type_source),
            quantite=ligne.quantite,
            unite=ligne.unite,
            matiere_premiere_id=getattr(ligne, "matiere_premiere_id", None),
            reception_id=getattr(ligne, "reception_id", None),
            lot_salaison_id=getattr(ligne, "lot_salaison_id", None),
            materiau_id=getattr(ligne, "materiau_id", None),
            reception_materiau_id=getattr(ligne, "reception_materiau_id", None),
        )
        for ligne in requete.lignes
    ]

    service = ServiceProduction(session)
    try:
        lot_id = await service.creer_lot(
            produit_id=requete.produit_id,
            quantite=requete.quantite,
            date_production=requete.date_production or date.today(),
            unite=requete.unite,
            heure_debut=requete.heure_debut,
            notes=requete.notes,
            operateur_id=utilisateur.id,
            lignes=lignes,
        )
    except DonneesInvalidesProduction as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return await service.charger_lot_complet(lot_id)


@routeur_production.patch("/batches/{lot_id}", response_model=LotProductionOut)
async def maj_lot(
    lot_id: UUID,
    requete: LotProductionUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> LotProduction:
    lot = await _lot_complet(session, lot_id)
    if lot.statut != StatutLotProduction.IN_PROGRESS:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Seul un lot en cours peut être modifié.")

    appliquer_modifications(lot, requete.model_dump(exclude_unset=True))
    await session.commit()
    return lot


@routeur_production.post("/batches/{lot_id}/complete", response_model=LotProductionOut)
async def terminer_lot(
    lot_id: UUID,
    requete: RequeteTerminerLotProduction,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    politique: PolitiqueConformite = Depends(fournir_politique_conformite),
    session: AsyncSession = Depends(fournir_session),
) -> LotProduction:
    """Fin de cuisson : la température finale est comparée à l'exigence du produit."""

    service = ServiceProduction(session, politique=politique)
    try:
        await service.terminer_lot(
            lot_id=lot_id,
            temperature_finale=requete.temperature_finale,
            heure_fin=requete.heure_fin,
            notes=requete.notes,
            utilisateur_id=utilisateur.id,
        )
    except DonneesInvalidesProduction as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except LotProductionIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransitionStatutInterditeProduction as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return await service.charger_lot_complet(lot_id)


@routeur_production.post("/batches/{lot_id}/release", response_model=LotProductionOut)
async def liberer_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> LotProduction:
    service = ServiceProduction(session)
    try:
        await service.liberer_lot(lot_id=lot_id)
    except LotProductionIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransitionStatutInterditeProduction as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return await service.charger_lot_complet(lot_id)


@routeur_production.post("/batches/{lot_id}/block", response_model=LotProductionOut)
async def bloquer_lot(
    lot_id: UUID,
    requete: RequeteBloquerLotProduction | None = None,
    session: AsyncSession = Depends(fournir_session),
) -> LotProduction:
    service = ServiceProduction(session)
    try:
        await service.bloquer_lot(lot_id=lot_id, notes=requete.notes if requete else None)
    except LotProductionIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except TransitionStatutInterditeProduction as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return await service.charger_lot_complet(lot_id)


@routeur_production.delete("/batches/{lot_id}")
async def supprimer_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    """Seul un lot encore en cours peut être supprimé ; ses lignes matière partent avec lui."""

    lot = await _lot_complet(session, lot_id)
    if lot.statut != StatutLotProduction.IN_PROGRESS:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Un lot terminé fait partie de l'historique HACCP : suppression impossible.",
        )
    await session.delete(lot)
    await session.commit()
    return {"statut": "ok"}


@routeur_production.get("/traceability/{lot_id}", response_model=ChronologieLotOut)
async def chronologie_lot(lot_id: UUID, session: AsyncSession = Depends(fournir_session)) -> ChronologieLot:
    try:
        return await ServiceTracabilite(session).chronologie(lot_id)
    except LotIntrouvableTracabilite as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@routeur_production.get("/available-materials", response_model=MatieresDisponiblesOut)
async def matieres_disponibles(
    session: AsyncSession = Depends(fournir_session),
    jours: int | None = Query(default=None, ge=1, le=365),
) -> MatieresDisponiblesOut:
    """Ce qui peut entrer dans un nouveau lot de production."""

    fenetre = jours if jours is not None else parametres_application.fenetre_viande_disponible_jours
    depuis = datetime.combine(date.today() - timedelta(days=fenetre), time.min, tzinfo=timezone.utc)

    res_receptions = await session.execute(
        select(ReceptionMatierePremiere, MatierePremiere.nom)
        .join(MatierePremiere, MatierePremiere.id == ReceptionMatierePremiere.matiere_premiere_id)
        .where(ReceptionMatierePremiere.conforme.is_(True))
        .where(ReceptionMatierePremiere.recue_le >= depuis)
        .order_by(ReceptionMatierePremiere.recue_le.desc())
    )
    matieres_premieres = [
        MatiereDisponibleOut(
            type_source=TypeSourceMatiere.RAW_MATERIAL,
            id=reception.matiere_premiere_id,
            libelle=nom,
            numero_lot=reception.numero_lot,
            quantite_disponible=float(reception.quantite),
            unite=reception.unite,
            reception_id=reception.id,
        )
        for reception, nom in res_receptions.all()
    ]

    disponibles = await ServiceSalaison(
        session,
        politique_stock=PolitiqueStockInsuffisant.IGNORE,
        motif_sel_nitrite=parametres_application.motif_sel_nitrite,
        duree_defaut_jours=parametres_application.duree_salaison_defaut_jours,
    ).lots_termines_disponibles()
    lots_salaison = [
        MatiereDisponibleOut(
            type_source=TypeSourceMatiere.CURING_BATCH,
            id=d.lot.id,
            libelle=d.lot.nom_produit,
            numero_lot=d.lot.numero_lot,
            quantite_disponible=d.quantite_disponible,
            unite=d.lot.unite,
        )
        for d in disponibles
    ]

    res_materiaux = await session.execute(
        select(ReceptionMateriau, Materiau.nom)
        .join(Materiau, Materiau.id == ReceptionMateriau.materiau_id)
        .where(ReceptionMateriau.quantite > 0)
        .where(or_(ReceptionMateriau.date_peremption.is_(None), ReceptionMateriau.date_peremption >= date.today()))
        .order_by(Materiau.nom.asc(), ReceptionMateriau.recue_le.asc())
    )
    materiaux = [
        MatiereDisponibleOut(
            type_source=TypeSourceMatiere.MATERIAL,
            id=reception.materiau_id,
            libelle=nom,
            numero_lot=reception.numero_lot,
            quantite_disponible=float(reception.quantite),
            unite=reception.unite,
            reception_id=reception.id,
        )
        for reception, nom in res_materiaux.all()
    ]

    return MatieresDisponiblesOut(
        matieres_premieres=matieres_premieres,
        lots_salaison=lots_salaison,
        materiaux=materiaux,
    )
