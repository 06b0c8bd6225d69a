from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.receptions import ReceptionMateriauOut, RequeteReceptionMateriau
from masarnia.api.schemas.referentiel import (
    FournisseurCreate,
    FournisseurOut,
    FournisseurUpdate,
    MateriauCreate,
    MateriauOut,
    MateriauUpdate,
    MatierePremiereCreate,
    MatierePremiereOut,
    MatierePremiereUpdate,
    ParametresEntrepriseOut,
    ParametresEntrepriseUpdate,
    ProduitCreate,
    ProduitOut,
    ProduitUpdate,
)
from masarnia.domaine.enums.types import CategorieMatierePremiere, RoleUtilisateur
from masarnia.domaine.modeles.receptions import ReceptionMateriau
from masarnia.domaine.modeles.referentiel import Fournisseur, Materiau, MatierePremiere, ParametresEntreprise, Produit
from masarnia.domaine.services.receptions import DonneesInvalidesReception, ServiceReceptions


_admin = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN))


async def _charger(session: AsyncSession, modele: type, identifiant: UUID, message: str):
    objet = await session.get(modele, identifiant)
    if objet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
    return objet


async def _supprimer(session: AsyncSession, objet: object) -> dict[str, str]:
    await session.delete(objet)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Suppression impossible : l'élément est référencé par des enregistrements.",
        ) from e
    return {"statut": "ok"}


# ==============================
# FOURNISSEURS
# ==============================
routeur_fournisseurs = APIRouter(
    prefix="/suppliers",
    tags=["fournisseurs"],
    dependencies=[Depends(verifier_authentifie)],
)


@routeur_fournisseurs.get("", response_model=list[FournisseurOut])
async def lister_fournisseurs(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[Fournisseur]:
    stmt = select(Fournisseur).order_by(Fournisseur.nom.asc())
    if actif is not None:
        stmt = stmt.where(Fournisseur.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_fournisseurs.get("/{fournisseur_id}", response_model=FournisseurOut)
async def lire_fournisseur(fournisseur_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Fournisseur:
    return await _charger(session, Fournisseur, fournisseur_id, "Fournisseur introuvable.")


@routeur_fournisseurs.post(
    "", response_model=FournisseurOut, status_code=status.HTTP_201_CREATED, dependencies=[_admin]
)
async def creer_fournisseur(requete: FournisseurCreate, session: AsyncSession = Depends(fournir_session)) -> Fournisseur:
    fournisseur = Fournisseur(**requete.model_dump())
    session.add(fournisseur)
    await session.commit()
    return fournisseur


@routeur_fournisseurs.patch("/{fournisseur_id}", response_model=FournisseurOut, dependencies=[_admin])
async def maj_fournisseur(
    fournisseur_id: UUID,
    requete: FournisseurUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Fournisseur:
    fournisseur = await _charger(session, Fournisseur, fournisseur_id, "Fournisseur introuvable.")
    appliquer_modifications(fournisseur, requete.model_dump(exclude_unset=True))
    await session.commit()
    return fournisseur


@routeur_fournisseurs.delete("/{fournisseur_id}", dependencies=[_admin])
async def supprimer_fournisseur(fournisseur_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    fournisseur = await _charger(session, Fournisseur, fournisseur_id, "Fournisseur introuvable.")
    return await _supprimer(session, fournisseur)


# ==============================
# MATIÈRES PREMIÈRES
# ==============================
routeur_matieres_premieres = APIRouter(
    prefix="/raw-materials",
    tags=["matieres_premieres"],
    dependencies=[Depends(verifier_authentifie)],
)


@routeur_matieres_premieres.get("", response_model=list[MatierePremiereOut])
async def lister_matieres_premieres(
    session: AsyncSession = Depends(fournir_session),
    categorie: CategorieMatierePremiere | None = Query(default=None),
) -> list[MatierePremiere]:
    stmt = select(MatierePremiere).order_by(MatierePremiere.nom.asc())
    if categorie is not None:
        stmt = stmt.where(MatierePremiere.categorie == categorie)
    return list((await session.execute(stmt)).scalars().all())


@routeur_matieres_premieres.get("/{matiere_id}", response_model=MatierePremiereOut)
async def lire_matiere_premiere(matiere_id: UUID, session: AsyncSession = Depends(fournir_session)) -> MatierePremiere:
    return await _charger(session, MatierePremiere, matiere_id, "Matière première introuvable.")


@routeur_matieres_premieres.post("", response_model=MatierePremiereOut, status_code=status.HTTP_201_CREATED)
async def creer_matiere_premiere(
    requete: MatierePremiereCreate,
    session: AsyncSession = Depends(fournir_session),
) -> MatierePremiere:
    if requete.fournisseur_id is not None:
        await _charger(session, Fournisseur, requete.fournisseur_id, "Fournisseur introuvable.")
    matiere = MatierePremiere(**requete.model_dump())
    session.add(matiere)
    await session.commit()
    return matiere


@routeur_matieres_premieres.patch("/{matiere_id}", response_model=MatierePremiereOut)
async def maj_matiere_premiere(
    matiere_id: UUID,
    requete: MatierePremiereUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> MatierePremiere:
    matiere = await _charger(session, MatierePremiere, matiere_id, "Matière première introuvable.")
    appliquer_modifications(matiere, requete.model_dump(exclude_unset=True))
    await session.commit()
    return matiere


@routeur_matieres_premieres.delete("/{matiere_id}")
async def supprimer_matiere_premiere(matiere_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    matiere = await _charger(session, MatierePremiere, matiere_id, "Matière première introuvable.")
    return await _supprimer(session, matiere)


# ==============================
# MATÉRIAUX (épices, sel nitrité, boyaux...)
# ==============================
routeur_materiaux = APIRouter(
    prefix="/materials",
    tags=["materiaux"],
    dependencies=[Depends(verifier_authentifie)],
)


@routeur_materiaux.get("", response_model=list[MateriauOut])
async def lister_materiaux(session: AsyncSession = Depends(fournir_session)) -> list[Materiau]:
    res = await session.execute(select(Materiau).order_by(Materiau.nom.asc()))
    return list(res.scalars().all())


# Déclarée avant /{materiau_id} pour ne pas être capturée par le paramètre.
@routeur_materiaux.get("/receipts", response_model=list[ReceptionMateriauOut])
async def lister_receptions_materiaux(
    session: AsyncSession = Depends(fournir_session),
    materiau_id: UUID | None = Query(default=None),
) -> list[ReceptionMateriau]:
    stmt = select(ReceptionMateriau).order_by(ReceptionMateriau.recue_le.desc())
    if materiau_id is not None:
        stmt = stmt.where(ReceptionMateriau.materiau_id == materiau_id)
    return list((await session.execute(stmt)).scalars().all())


@routeur_materiaux.post(
    "/receipts",
    response_model=ReceptionMateriauOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[_admin],
)
async def receptionner_materiau(
    requete: RequeteReceptionMateriau,
    session: AsyncSession = Depends(fournir_session),
) -> ReceptionMateriau:
    service = ServiceReceptions(session)

    try:
        return await service.receptionner_materiau(
            materiau_id=requete.materiau_id,
            numero_lot=requete.numero_lot,
            quantite=requete.quantite,
            unite=requete.unite,
            fournisseur_id=requete.fournisseur_id,
            date_peremption=requete.date_peremption,
            prix_unitaire=requete.prix_unitaire,
            numero_document=requete.numero_document,
            notes=requete.notes,
            recue_le=requete.recue_le,
        )
    except DonneesInvalidesReception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@routeur_materiaux.get("/{materiau_id}", response_model=MateriauOut)
async def lire_materiau(materiau_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Materiau:
    return await _charger(session, Materiau, materiau_id, "Matériau introuvable.")


@routeur_materiaux.post("", response_model=MateriauOut, status_code=status.HTTP_201_CREATED, dependencies=[_admin])
async def creer_materiau(requete: MateriauCreate, session: AsyncSession = Depends(fournir_session)) -> Materiau:
    materiau = Materiau(**requete.model_dump(), stock_actuel=0.0)
    session.add(materiau)
    await session.commit()
    return materiau


@routeur_materiaux.patch("/{materiau_id}", response_model=MateriauOut, dependencies=[_admin])
async def maj_materiau(
    materiau_id: UUID,
    requete: MateriauUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Materiau:
    materiau = await _charger(session, Materiau, materiau_id, "Matériau introuvable.")
    appliquer_modifications(materiau, requete.model_dump(exclude_unset=True))
    await session.commit()
    return materiau


@routeur_materiaux.delete("/{materiau_id}", dependencies=[_admin])
async def supprimer_materiau(materiau_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    materiau = await _charger(session, Materiau, materiau_id, "Matériau introuvable.")
    return await _supprimer(session, materiau)


# ==============================
# PRODUITS
# ==============================
routeur_produits = APIRouter(
    prefix="/products",
    tags=["produits"],
    dependencies=[Depends(verifier_authentifie)],
)


@routeur_produits.get("", response_model=list[ProduitOut])
async def lister_produits(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[Produit]:
    stmt = select(Produit).order_by(Produit.nom.asc())
    if actif is not None:
        stmt = stmt.where(Produit.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_produits.get("/{produit_id}", response_model=ProduitOut)
async def lire_produit(produit_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Produit:
    return await _charger(session, Produit, produit_id, "Produit introuvable.")


@routeur_produits.post("", response_model=ProduitOut, status_code=status.HTTP_201_CREATED, dependencies=[_admin])
async def creer_produit(requete: ProduitCreate, session: AsyncSession = Depends(fournir_session)) -> Produit:
    produit = Produit(**requete.model_dump())
    session.add(produit)
    await session.commit()
    return produit


@routeur_produits.patch("/{produit_id}", response_model=ProduitOut, dependencies=[_admin])
async def maj_produit(
    produit_id: UUID,
    requete: ProduitUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Produit:
    produit = await _charger(session, Produit, produit_id, "Produit introuvable.")
    appliquer_modifications(produit, requete.model_dump(exclude_unset=True))
    await session.commit()
    return produit


@routeur_produits.delete("/{produit_id}", dependencies=[_admin])
async def supprimer_produit(produit_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    produit = await _charger(session, Produit, produit_id, "Produit introuvable.")
    return await _supprimer(session, produit)


# ==============================
# PARAMÈTRES ENTREPRISE
# ==============================
routeur_parametres = APIRouter(
    prefix="/settings",
    tags=["parametres"],
    dependencies=[Depends(verifier_authentifie)],
)


async def _parametres_entreprise(session: AsyncSession) -> ParametresEntreprise:
    """Ligne unique, créée avec les valeurs par défaut à la première lecture."""

    res = await session.execute(select(ParametresEntreprise).limit(1))
    parametres = res.scalar_one_or_none()
    if parametres is None:
        parametres = ParametresEntreprise(nom_entreprise="Masarnia")
        session.add(parametres)
        await session.commit()
    return parametres


@routeur_parametres.get("", response_model=ParametresEntrepriseOut)
async def lire_parametres(session: AsyncSession = Depends(fournir_session)) -> ParametresEntreprise:
    return await _parametres_entreprise(session)


@routeur_parametres.patch("", response_model=ParametresEntrepriseOut, dependencies=[_admin])
async def maj_parametres(
    requete: ParametresEntrepriseUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> ParametresEntreprise:
    parametres = await _parametres_entreprise(session)
    appliquer_modifications(parametres, requete.model_dump(exclude_unset=True))
    await session.commit()
    return parametres
