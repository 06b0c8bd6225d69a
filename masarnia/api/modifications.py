from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import inspect


def champs_non_nullables(objet: object) -> set[str]:
    return {attribut.key for attribut in inspect(type(objet)).column_attrs if not attribut.columns[0].nullable}


def appliquer_modifications(objet: object, modifications: dict[str, Any]) -> None:
    """Applique un PATCH partiel sur une ligne du registre.

    Un `null` explicite efface un champ facultatif. Sur une colonne NOT NULL il est
    refusé (422) avant toute écriture, la ligne reste donc intacte.
    """

    obligatoires = champs_non_nullables(objet)
    vides = sorted(champ for champ, valeur in modifications.items() if valeur is None and champ in obligatoires)
    if vides:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Champ(s) obligatoire(s) ne pouvant pas être vide(s) : {', '.join(vides)}.",
        )

    for champ, valeur in modifications.items():
        setattr(objet, champ, valeur)
