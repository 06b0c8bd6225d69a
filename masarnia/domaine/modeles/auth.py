from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.base import ModeleHorodate


class Utilisateur(ModeleHorodate):
    """Compte applicatif.

    Un seul rôle par utilisateur : ADMIN, MANAGER ou EMPLOYEE.
    """

    __tablename__ = "utilisateur"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    nom: Mapped[str] = mapped_column(String(200), nullable=False)
    mot_de_passe_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[RoleUtilisateur] = mapped_column(
        Enum(RoleUtilisateur, native_enum=False, length=50),
        nullable=False,
        default=RoleUtilisateur.EMPLOYEE,
    )
    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    dernier_login_le: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
