from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.registres import DocumentCreate, DocumentOut, DocumentUpdate
from masarnia.domaine.enums.types import CategorieDocument, RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.documents import Document


routeur_documents = APIRouter(
    prefix="/documents",
    tags=["documents"],
    dependencies=[Depends(verifier_authentifie)],
)

_responsable = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN, RoleUtilisateur.MANAGER))


async def _charger_document(session: AsyncSession, document_id: UUID) -> Document:
    document = await session.get(Document, document_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document introuvable.")
    return document


def _verifier_validite(valide_du: date | None, valide_au: date | None) -> None:
    if valide_du is not None and valide_au is not None and valide_au < valide_du:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La fin de validité ne peut précéder son début.",
        )


@routeur_documents.get("", response_model=list[DocumentOut])
async def lister_documents(
    session: AsyncSession = Depends(fournir_session),
    categorie: CategorieDocument | None = Query(default=None),
) -> list[Document]:
    stmt = select(Document).order_by(Document.categorie.asc(), Document.titre.asc())
    if categorie is not None:
        stmt = stmt.where(Document.categorie == categorie)
    return list((await session.execute(stmt)).scalars().all())


@routeur_documents.get("/{document_id}", response_model=DocumentOut)
async def lire_document(document_id: UUID, session: AsyncSession = Depends(fournir_session)) -> Document:
    return await _charger_document(session, document_id)


@routeur_documents.post("", response_model=DocumentOut, status_code=status.HTTP_201_CREATED, dependencies=[_responsable])
async def creer_document(
    requete: DocumentCreate,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    session: AsyncSession = Depends(fournir_session),
) -> Document:
    _verifier_validite(requete.valide_du, requete.valide_au)

    document = Document(**requete.model_dump(), depose_par_id=utilisateur.id)
    session.add(document)
    await session.commit()
    return document


@routeur_documents.patch("/{document_id}", response_model=DocumentOut, dependencies=[_responsable])
async def maj_document(
    document_id: UUID,
    requete: DocumentUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> Document:
    document = await _charger_document(session, document_id)
    appliquer_modifications(document, requete.model_dump(exclude_unset=True))
    _verifier_validite(document.valide_du, document.valide_au)
    await session.commit()
    return document


@routeur_documents.delete("/{document_id}", dependencies=[_responsable])
async def supprimer_document(document_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    document = await _charger_document(session, document_id)
    await session.delete(document)
    await session.commit()
    return {"statut": "ok"}
