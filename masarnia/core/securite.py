from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from masarnia.domaine.enums.types import RoleUtilisateur


ALGORITHME_JWT = "HS256"

# bcrypt ignore tout au-delà de 72 octets (les caractères polonais en prennent 2).
LONGUEUR_MAX_MOT_DE_PASSE_OCTETS = 72
MESSAGE_MOT_DE_PASSE_TROP_LONG = "Mot de passe trop long (72 octets au maximum)."

_contexte_mots_de_passe = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def hasher_mot_de_passe(mot_de_passe: str) -> str:
    return _contexte_mots_de_passe.hash(mot_de_passe)


def mot_de_passe_trop_long(mot_de_passe: str) -> bool:
    return len(mot_de_passe.encode("utf-8")) > LONGUEUR_MAX_MOT_DE_PASSE_OCTETS


def verifier_mot_de_passe(mot_de_passe: str, mot_de_passe_hash: str) -> tuple[bool, str | None]:
    """Vérifie le mot de passe et renvoie un nouveau hash si le coût bcrypt a changé."""

    return _contexte_mots_de_passe.verify_and_update(mot_de_passe, mot_de_passe_hash)


def creer_token_acces(
    *,
    secret: str,
    sujet: str,
    duree_minutes: int,
    role: RoleUtilisateur | str,
) -> str:
    emis_le = datetime.now(tz=timezone.utc)

    return jwt.encode(
        {
            "sub": sujet,
            "role": role.value if isinstance(role, RoleUtilisateur) else role,
            "iat": int(emis_le.timestamp()),
            "exp": int((emis_le + timedelta(minutes=duree_minutes)).timestamp()),
        },
        secret,
        algorithm=ALGORITHME_JWT,
    )


def decoder_token_acces(token: str, *, secret: str) -> dict:
    """Lève `jwt.PyJWTError` si la signature, l'expiration ou un champ obligatoire manque."""

    return jwt.decode(token, secret, algorithms=[ALGORITHME_JWT], options={"require": ["sub", "exp"]})
