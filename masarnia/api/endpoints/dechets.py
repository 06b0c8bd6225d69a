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
    CollecteurDechetsCreate,
    CollecteurDechetsOut,
    CollecteurDechetsUpdate,
    EnregistrementDechetCreate,
    EnregistrementDechetOut,
    EnregistrementDechetUpdate,
    QuantiteParTypeOut,
    SyntheseDechetsOut,
    TypeDechetCreate,
    TypeDechetOut,
    TypeDechetUpdate,
)
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.dechets import CollecteurDechets, EnregistrementDechet, TypeDechet


routeur_dechets = APIRouter(
    prefix="/waste",
    tags=["dechets"],
    dependencies=[Depends(verifier_authentifie)],
)


async def _charger_type(session: AsyncSession, type_id: UUID) -> TypeDechet:
    type_dechet = await session.get(TypeDechet, type_id)
    if type_dechet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Type de déchet introuvable.")
    return type_dechet


async def _charger_collecteur(session: AsyncSession, collecteur_id: UUID) -> CollecteurDechets:
    collecteur = await session.get(CollecteurDechets, collecteur_id)
    if collecteur is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Collecteur introuvable.")
    return collecteur


async def _charger_enregistrement(session: AsyncSession, enregistrement_id: UUID) -> EnregistrementDechet:
    enregistrement = await session.get(EnregistrementDechet, enregistrement_id)
    if enregistrement is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enlèvement introuvable.")
    return enregistrement


async def _nb_enlevements(session: AsyncSession, *critere) -> int:
    res = await session.execute(select(func.count(EnregistrementDechet.id)).where(*critere))
    return int(res.scalar_one())


# ===== Types =====


@routeur_dechets.get("/types", response_model=list[TypeDechetOut])
async def lister_types(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[TypeDechet]:
    stmt = select(TypeDechet).order_by(TypeDechet.categorie.asc(), TypeDechet.nom.asc())
    if actif is not None:
        stmt = stmt.where(TypeDechet.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_dechets.post("/types", response_model=TypeDechetOut, status_code=status.HTTP_201_CREATED)
async def creer_type(requete: TypeDechetCreate, session: AsyncSession = Depends(fournir_session)) -> TypeDechet:
    type_dechet = TypeDechet(**requete.model_dump())
    session.add(type_dechet)
    await session.commit()
    return type_dechet


@routeur_dechets.patch("/types/{type_id}", response_model=TypeDechetOut)
async def maj_type(
    type_id: UUID,
    requete: TypeDechetUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> TypeDechet:
    type_dechet = await _charger_type(session, type_id)
    appliquer_modifications(type_dechet, requete.model_dump(exclude_unset=True))
    await session.commit()
    return type_dechet


@routeur_dechets.delete("/types/{type_id}")
async def supprimer_type(type_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    type_dechet = await _charger_type(session, type_id)
    if await _nb_enlevements(session, EnregistrementDechet.type_dechet_id == type_id) > 0:
        type_dechet.actif = False
        await session.commit()
        return {"statut": "desactive"}

    await session.delete(type_dechet)
    await session.commit()
    return {"statut": "ok"}


# ===== Collecteurs =====


@routeur_dechets.get("/collectors", response_model=list[CollecteurDechetsOut])
async def lister_collecteurs(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[CollecteurDechets]:
    stmt = select(CollecteurDechets).order_by(CollecteurDechets.nom.asc())
    if actif is not None:
        stmt = stmt.where(CollecteurDechets.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_dechets.post("/collectors", response_model=CollecteurDechetsOut, status_code=status.HTTP_201_CREATED)
async def creer_collecteur(
    requete: CollecteurDechetsCreate,
    session: AsyncSession = Depends(fournir_session),
) -> CollecteurDechets:
    collecteur = CollecteurDechets(**requete.model_dump())
    session.add(collecteur)
    await session.commit()
    return collecteur


@routeur_dechets.patch("/collectors/{collecteur_id}", response_model=CollecteurDechetsOut)
async def maj_collecteur(
    collecteur_id: UUID,
    requete: CollecteurDechetsUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> CollecteurDechets:
    collecteur = await _charger_collecteur(session, collecteur_id)
    appliquer_modifications(collecteur, requete.model_dump(exclude_unset=True))
    await session.commit()
    return collecteur


@routeur_dechets.delete("/collectors/{collecteur_id}")
async def supprimer_collecteur(collecteur_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    collecteur = await _charger_collecteur(session, collecteur_id)
    if await _nb_enlevements(session, EnregistrementDechet.collecteur_id == collecteur_id) > 0:
        collecteur.actif = False
        await session.commit()
        return {"statut": "desactive"}

    await session.delete(collecteur)
    await session.commit()
    return {"statut": "ok"}


# ===== Synthèse =====


@routeur_dechets.get("/stats/summary", response_model=SyntheseDechetsOut)
async def synthese(
    session: AsyncSession = Depends(fournir_session),
    du: date | None = Query(default=None),
    au: date | None = Query(default=None),
) -> SyntheseDechetsOut:
    """Quantités enlevées par type de déchet sur la période."""

    stmt = (
        select(
            TypeDechet.id,
            TypeDechet.nom,
            TypeDechet.unite,
            func.coalesce(func.sum(EnregistrementDechet.quantite), 0.0),
            func.count(EnregistrementDechet.id),
        )
        .join(TypeDechet, TypeDechet.id == EnregistrementDechet.type_dechet_id)
        .group_by(TypeDechet.id, TypeDechet.nom, TypeDechet.unite)
        .order_by(TypeDechet.nom.asc())
    )
    if du is not None:
        stmt = stmt.where(EnregistrementDechet.date_collecte >= du)
    if au is not None:
        stmt = stmt.where(EnregistrementDechet.date_collecte <= au)

    par_type = [
        QuantiteParTypeOut(
            type_dechet_id=type_id,
            nom=nom,
            unite=unite,
            quantite_totale=round(float(total), 3),
            nb_enlevements=int(nb),
        )
        for type_id, nom, unite, total, nb in (await session.execute(stmt)).all()
    ]
    return SyntheseDechetsOut(nb_enlevements=sum(t.nb_enlevements for t in par_type), par_type=par_type)


# ===== Enlèvements =====


@routeur_dechets.get("", response_model=list[EnregistrementDechetOut])
async def lister_enlevements(
    session: AsyncSession = Depends(fournir_session),
    type_dechet_id: UUID | None = Query(default=None),
    collecteur_id: UUID | None = Query(default=None),
    du: date | None = Query(default=None),
    au: date | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
) -> list[EnregistrementDechet]:
    stmt = select(EnregistrementDechet).order_by(EnregistrementDechet.date_collecte.desc()).limit(limit)
    if type_dechet_id is not None:
        stmt = stmt.where(EnregistrementDechet.type_dechet_id == type_dechet_id)
    if collecteur_id is not None:
        stmt = stmt.where(EnregistrementDechet.collecteur_id == collecteur_id)
    if du is not None:
        stmt = stmt.where(EnregistrementDechet.date_collecte >= du)
    if au is not None:
        stmt = stmt.where(EnregistrementDechet.date_collecte <= au)
    return list((await session.execute(stmt)).scalars().all())


@routeur_dechets.get("/{enregistrement_id}", response_model=EnregistrementDechetOut)
async def lire_enlevement(
    enregistrement_id: UUID,
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementDechet:
    return await _charger_enregistrement(session, enregistrement_id)


@routeur_dechets.post("", response_model=EnregistrementDechetOut, status_code=status.HTTP_201_CREATED)
async def creer_enlevement(
    requete: EnregistrementDechetCreate,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementDechet:
    type_dechet = await session.get(TypeDechet, requete.type_dechet_id)
    if type_dechet is None or not type_dechet.actif:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Type de déchet inconnu ou inactif.")
    if requete.collecteur_id is not None:
        collecteur = await session.get(CollecteurDechets, requete.collecteur_id)
        if collecteur is None or not collecteur.actif:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Collecteur inconnu ou inactif.")

    enregistrement = EnregistrementDechet(**requete.model_dump(), utilisateur_id=utilisateur.id)
    session.add(enregistrement)
    await session.commit()
    return enregistrement


@routeur_dechets.patch("/{enregistrement_id}", response_model=EnregistrementDechetOut)
async def maj_enlevement(
    enregistrement_id: UUID,
    requete: EnregistrementDechetUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementDechet:
    enregistrement = await _charger_enregistrement(session, enregistrement_id)
    appliquer_modifications(enregistrement, requete.model_dump(exclude_unset=True))
    await session.commit()
    return enregistrement


@routeur_dechets.delete("/{enregistrement_id}")
async def supprimer_enlevement(
    enregistrement_id: UUID,
    session: AsyncSession = Depends(fournir_session),
) -> dict[str, str]:
    enregistrement = await _charger_enregistrement(session, enregistrement_id)
    await session.delete(enregistrement)
    await session.commit()
    return {"statut": "ok"}
