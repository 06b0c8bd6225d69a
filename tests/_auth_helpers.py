"""Helpers d'auth STRICTEMENT côté tests.

Les utilisateurs créés ici n'ont pas besoin de se connecter : le token est
signé directement, sans passer par bcrypt.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.core.configuration import parametres_application
from masarnia.core.securite import creer_token_acces
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.auth import Utilisateur


# Hash bcrypt "valide" (format) mais constant. Ne pas utiliser en prod.
FAKE_BCRYPT_HASH = "$2b$12$C6UzMDM.H6dfI/f/IKcEeO5H/1h9WlH0I1d9YxwE8VqQX2E7p.5W2"


async def creer_utilisateur(
    session: AsyncSession,
    *,
    role: RoleUtilisateur = RoleUtilisateur.EMPLOYEE,
    email: str | None = None,
    actif: bool = True,
) -> Utilisateur:
    utilisateur = Utilisateur(
        email=email or f"{role.value.lower()}@masarnia.test",
        nom=f"Test {role.value.title()}",
        mot_de_passe_hash=FAKE_BCRYPT_HASH,
        role=role,
        actif=actif,
    )
    session.add(utilisateur)
    await session.commit()
    return utilisateur


def entetes_auth(utilisateur: Utilisateur) -> dict[str, str]:
    token = creer_token_acces(
        secret=parametres_application.jwt_secret,
        sujet=str(utilisateur.id),
        duree_minutes=30,
        role=utilisateur.role.value,
    )
    return {"Authorization": f"Bearer {token}"}
