from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from masarnia.domaine.enums.types import RoleUtilisateur


class RequeteLogin(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    mot_de_passe: str = Field(min_length=1)


class RequeteInscription(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    nom: str = Field(min_length=1, max_length=200)
    mot_de_passe: str = Field(min_length=8)


class UtilisateurLecture(BaseModel):
    id: UUID
    email: str
    nom: str
    role: RoleUtilisateur
    actif: bool
    dernier_login_le: datetime | None = None

    class Config:
        from_attributes = True


class ReponseLogin(BaseModel):
    token_acces: str
    type_token: str = "bearer"
    utilisateur: UtilisateurLecture


class UtilisateurCreation(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    nom: str = Field(min_length=1, max_length=200)
    mot_de_passe: str = Field(min_length=8)
    role: RoleUtilisateur = RoleUtilisateur.EMPLOYEE


class UtilisateurMiseAJour(BaseModel):
    nom: str | None = Field(default=None, min_length=1, max_length=200)
    role: RoleUtilisateur | None = None
    actif: bool | None = None
    mot_de_passe: str | None = Field(default=None, min_length=8)
