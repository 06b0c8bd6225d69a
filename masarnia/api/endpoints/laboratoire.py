from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.registres import (
    AnalyseLaboCreate,
    AnalyseLaboOut,
    AnalyseLaboUpdate,
    SyntheseAnalysesOut,
    TypeAnalyseLaboCreate,
    TypeAnalyseLaboOut,
    TypeAnalyseLaboUpdate,
)
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.laboratoire import AnalyseLabo, TypeAnalyseLabo


routeur_laboratoire = APIRouter(
    prefix="/lab-tests",
    tags=["laboratoire"],
    dependencies=[Depends(verifier_authentifie)],
)


def taux_conformite(conformes: int, non_conformes: int) -> float:
    """Part des résultats conformes parmi les résultats rendus, en %."""

    rendus = conformes + non_conformes
    if rendus == 0:
        return 0.0
    return round(100.0 * conformes / rendus, 1)


async def _charger_type(session: AsyncSession, type_id: UUID) -> TypeAnalyseLabo:
    type_analyse = await session.get(TypeAnalyseLabo, type_id)
    if type_analyse is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Type d'analyse introuvable.")
    return type_analyse


async def _charger_analyse(session: AsyncSession, analyse_id: UUID) -> AnalyseLabo:
    analyse = await session.get(AnalyseLabo, analyse_id)
    if analyse is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analyse introuvable.")
    return analyse


# ===== Types d'analyse =====


@routeur_laboratoire.get("/types", response_model=list[TypeAnalyseLaboOut])
async def lister_types(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[TypeAnalyseLabo]:
    stmt = select(TypeAnalyseLabo).order_by(TypeAnalyseLabo.categorie.asc(), TypeAnalyseLabo.nom.asc())
    if actif is not None:
        stmt = stmt.where(TypeAnalyseLabo.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_laboratoire.post("/types", response_model=TypeAnalyseLaboOut, status_code=status.HTTP_201_CREATED)
async def creer_type(requete: TypeAnalyseLaboCreate, session: AsyncSession = Depends(fournir_session)) -> TypeAnalyseLabo:
    type_analyse = TypeAnalyseLabo(**requete.model_dump())
    session.add(type_analyse)
    await session.commit()
    return type_analyse


@routeur_laboratoire.patch("/types/{type_id}", response_model=TypeAnalyseLaboOut)
async def maj_type(
    type_id: UUID,
    requete: TypeAnalyseLaboUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> TypeAnalyseLabo:
    type_analyse = await _charger_type(session, type_id)
    appliquer_modifications(type_analyse, requete.model_dump(exclude_unset=True))
    await session.commit()
    return type_analyse


@routeur_laboratoire.delete("/types/{type_id}")
async def supprimer_type(type_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    """Un type déjà utilisé est désactivé, pas supprimé."""

    type_analyse = await _charger_type(session, type_id)
    utilise = await session.execute(select(func.count(AnalyseLabo.id)).where(AnalyseLabo.type_analyse_id == type_id))
    if int(utilise.scalar_one()) > 0:
        type_analyse.actif = False
        await session.commit()
        return {"statut": "desactive"}

    await session.delete(type_analyse)
    await session.commit()
    return {"statut": "ok"}


# ===== Synthèse =====


@routeur_laboratoire.get("/stats/summary", response_model=SyntheseAnalysesOut)
async def synthese(
    session: AsyncSession = Depends(fournir_session),
    du: date | None = Query(default=None),
    au: date | None = Query(default=None),
) -> SyntheseAnalysesOut:
    stmt = select(AnalyseLabo.conforme, func.count(AnalyseLabo.id)).group_by(AnalyseLabo.conforme)
    if du is not None:
        stmt = stmt.where(AnalyseLabo.date_prelevement >= du)
    if au is not None:
        stmt = stmt.where(AnalyseLabo.date_prelevement <= au)

    compte = {conforme: int(nb) for conforme, nb in (await session.execute(stmt)).all()}
    conformes = compte.get(True, 0)
    non_conformes = compte.get(False, 0)
    en_attente = compte.get(None, 0)

    return SyntheseAnalysesOut(
        total=conformes + non_conformes + en_attente,
        conformes=conformes,
        non_conformes=non_conformes,
        en_attente=en_attente,
        taux_conformite=taux_conformite(conformes, non_conformes),
    )


# ===== Analyses =====


@routeur_laboratoire.get("", response_model=list[AnalyseLaboOut])
async def lister_analyses(
    session: AsyncSession = Depends(fournir_session),
    type_analyse_id: UUID | None = Query(default=None),
    conforme: bool | None = Query(default=None),
    en_attente: bool = Query(default=False),
    limit: int = Query(100, ge=1, le=1000),
) -> list[AnalyseLabo]:
    stmt = select(AnalyseLabo).order_by(AnalyseLabo.date_prelevement.desc()).limit(limit)
    if type_analyse_id is not None:
        stmt = stmt.where(AnalyseLabo.type_analyse_id == type_analyse_id)
    if en_attente:
        stmt = stmt.where(AnalyseLabo.conforme.is_(None))
    elif conforme is not None:
        stmt = stmt.where(AnalyseLabo.conforme.is_(conforme))
    return list((await session.execute(stmt)).scalars().all())


@routeur_laboratoire.get("/{analyse_id}", response_model=AnalyseLaboOut)
async def lire_analyse(analyse_id: UUID, session: AsyncSession = Depends(fournir_session)) -> AnalyseLabo:
    return await _charger_analyse(session, analyse_id)


@routeur_laboratoire.post("", response_model=AnalyseLaboOut, status_code=status.HTTP_201_CREATED)
async def creer_analyse(
    requete: AnalyseLaboCreate,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> AnalyseLabo:
    type_analyse = await session.get(TypeAnalyseLabo, requete.type_analyse_id)
    if type_analyse is None or not type_analyse.actif:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Type d'analyse inconnu ou inactif.")

    analyse = AnalyseLabo(**requete.model_dump(), utilisateur_id=utilisateur.id)
    session.add(analyse)
    await session.commit()
    return analyse


@routeur_laboratoire.patch("/{analyse_id}", response_model=AnalyseLaboOut)
async def maj_analyse(
    analyse_id: UUID,
    requete: AnalyseLaboUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> AnalyseLabo:
    """Saisie du résultat rendu par le laboratoire."""

    analyse = await _charger_analyse(session, analyse_id)
    appliquer_modifications(analyse, requete.model_dump(exclude_unset=True))
    await session.commit()
    return analyse


@routeur_laboratoire.delete("/{analyse_id}")
async def supprimer_analyse(analyse_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    analyse = await _charger_analyse(session, analyse_id)
    await session.delete(analyse)
    await session.commit()
    return {"statut": "ok"}
