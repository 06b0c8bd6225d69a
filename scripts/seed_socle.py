"""Données de base d'une masarnia neuve.

Idempotent : chaque élément est recherché par son nom (ou email / code) avant création.

Usage:
    python -m scripts.seed_socle
"""

from __future__ import annotations

import asyncio
import logging
import os

from sqlalchemy import select

from masarnia.core.base_donnees import fermer_moteur, fournir_session_async
from masarnia.core.logging_config import configurer_logging
from masarnia.core.securite import hasher_mot_de_passe
from masarnia.domaine.enums.types import RoleUtilisateur, TypeDanger, TypePointTemperature
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.haccp import CCP
from masarnia.domaine.modeles.hygiene import PointTemperature
from masarnia.domaine.modeles.referentiel import Materiau, ParametresEntreprise


logger = logging.getLogger(__name__)


CCPS = [
    {
        "code": "CCP1",
        "nom": "Przyjęcie surowców",
        "description": "Kontrola temperatury i jakości surowców przy przyjęciu",
        "limite_critique": "Temperatura mięsa ≤ 7°C, brak oznak zepsucia",
        "methode_surveillance": "Pomiar temperatury termometrem, kontrola wizualna",
        "frequence_surveillance": "Każda dostawa",
        "action_corrective": "Odrzucenie dostawy, powiadomienie dostawcy",
    },
    {
        "code": "CCP2",
        "nom": "Przechowywanie chłodnicze",
        "description": "Utrzymanie łańcucha chłodniczego",
        "limite_critique": "Temperatura chłodni 0-4°C",
        "methode_surveillance": "Odczyt termometru chłodni",
        "frequence_surveillance": "2 razy dziennie",
        "action_corrective": "Przeniesienie towaru, serwis urządzenia",
    },
    {
        "code": "CCP3",
        "nom": "Obróbka termiczna",
        "description": "Parzenie / pieczenie wyrobów",
        "limite_critique": "Temperatura wewnętrzna produktu ≥ 72°C przez min. 2 minuty",
        "methode_surveillance": "Pomiar sondą w centrum geometrycznym",
        "frequence_surveillance": "Każda partia",
        "action_corrective": "Kontynuacja obróbki, blokada partii",
    },
]

CHLODNIE = ["Chłodnia nr 1", "Chłodnia nr 2", "Chłodnia nr 3"]


async def seed() -> None:
    async for session in fournir_session_async():
        # administrateur par défaut
        email = os.getenv("SEED_ADMIN_EMAIL", "admin@masarnia.local").lower()
        res = await session.execute(select(Utilisateur).where(Utilisateur.email == email))
        if res.scalar_one_or_none() is None:
            session.add(
                Utilisateur(
                    email=email,
                    nom="Administrator",
                    mot_de_passe_hash=hasher_mot_de_passe(os.getenv("SEED_ADMIN_MOT_DE_PASSE", "ChangeMe123!")),
                    role=RoleUtilisateur.ADMIN,
                    actif=True,
                )
            )
            logger.info("seed_admin_cree email=%s", email)

        # plan HACCP minimal
        ccps: dict[str, CCP] = {}
        for donnees in CCPS:
            res = await session.execute(select(CCP).where(CCP.code == donnees["code"]))
            ccp = res.scalar_one_or_none()
            if ccp is None:
                ccp = CCP(type_danger=TypeDanger.BIOLOGICAL, actif=True, **donnees)
                session.add(ccp)
                await session.flush()
            ccps[donnees["code"]] = ccp

        for nom in CHLODNIE:
            res = await session.execute(select(PointTemperature).where(PointTemperature.nom == nom))
            if res.scalar_one_or_none() is None:
                session.add(
                    PointTemperature(
                        nom=nom,
                        emplacement="Hala produkcyjna",
                        type_point=TypePointTemperature.COOLER,
                        temperature_min=0.0,
                        temperature_max=4.0,
                        ccp_id=ccps["CCP2"].id,
                        actif=True,
                    )
                )

        # sel nitrité : matériau débité par la salaison
        res = await session.execute(select(Materiau).where(Materiau.nom == "Sól peklowa"))
        if res.scalar_one_or_none() is None:
            session.add(Materiau(nom="Sól peklowa", categorie="ADDITIVES", unite="kg", stock_actuel=0.0, actif=True))

        res = await session.execute(select(ParametresEntreprise))
        if res.scalars().first() is None:
            session.add(ParametresEntreprise(nom_entreprise="Masarnia"))

        await session.commit()
        logger.info("seed_socle_termine")

    await fermer_moteur()


if __name__ == "__main__":
    configurer_logging()
    asyncio.run(seed())
