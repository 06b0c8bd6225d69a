from __future__ import annotations

import logging
import os


FORMAT_JOURNAL = "%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"

# Bibliothèques bavardes ramenées à WARNING sauf demande explicite.
_LOGGERS_TIERS = ("sqlalchemy.engine", "passlib", "multipart")


def _niveau(variable: str, defaut: str) -> int:
    return getattr(logging, os.getenv(variable, defaut).upper().strip(), logging.INFO)


def configurer_logging() -> None:
    """Logging de l'API et des scripts.

    - LOG_LEVEL règle le niveau de l'application (INFO par défaut)
    - LOG_SQL=1 affiche les requêtes SQLAlchemy (registres, stocks) pour le diagnostic
    - un appel répété ne duplique pas les handlers
    """

    niveau = _niveau("LOG_LEVEL", "INFO")

    racine = logging.getLogger()
    if racine.handlers:
        racine.setLevel(niveau)
    else:
        logging.basicConfig(level=niveau, format=FORMAT_JOURNAL)

    for nom in _LOGGERS_TIERS:
        logging.getLogger(nom).setLevel(logging.WARNING)
    if os.getenv("LOG_SQL", "").strip() in {"1", "true", "oui"}:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
