from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from io import BytesIO

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.modeles.audits import ChecklistAudit, EnregistrementAudit
from masarnia.domaine.modeles.dechets import CollecteurDechets, EnregistrementDechet, TypeDechet
from masarnia.domaine.modeles.haccp import CCP, Danger
from masarnia.domaine.modeles.hygiene import (
    ControleNuisibles,
    EnregistrementNettoyage,
    PointNuisibles,
    PointTemperature,
    ReleveTemperature,
    ZoneNettoyage,
)
from masarnia.domaine.modeles.production import LotProduction
from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Fournisseur, MatierePremiere, ParametresEntreprise, Produit
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.services.conformite import priorite_controle_nuisibles


class ErreurRapport(Exception):
    """Erreur générique de génération de rapport."""


class PeriodeInvalide(ErreurRapport):
    """Bornes de période incohérentes."""


@dataclass(frozen=True)
class Colonne:
    libelle: str
    x_mm: float
    alignement_droite: bool = False


@dataclass(frozen=True)
class DonneesRapport:
    """Contenu d'un registre, indépendant du rendu.

    `du` et `au` valent None pour un document sans période (plan HACCP).
    """

    titre: str
    entreprise: str
    du: date | None
    au: date | None
    colonnes: list[Colonne]
    lignes: list[list[str]]
    synthese: list[str] = field(default_factory=list)


def pourcentage(nombre: int, total: int) -> float:
    """Pourcentage à une décimale ; 0.0 sans données."""

    if total <= 0:
        return 0.0
    return round(100 * nombre / total, 1)


def _borne_debut(jour: date) -> datetime:
    return datetime.combine(jour, time.min, tzinfo=timezone.utc)


def _borne_fin_exclue(jour: date) -> datetime:
    return datetime.combine(jour + timedelta(days=1), time.min, tzinfo=timezone.utc)


def _tronquer(texte: str | None, longueur: int) -> str:
    if not texte:
        return "-"
    return texte if len(texte) <= longueur else texte[: longueur - 1] + "…"


class ServiceRapportsPDF:
    """Registres HACCP au format PDF, un par activité tracée, plus le plan HACCP.

    Pas d’accès disque : chaque rapport est retourné en bytes.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def rapport_temperatures(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_temperatures(du=du, au=au))

    async def rapport_audits(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_audits(du=du, au=au))

    async def rapport_production(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_production(du=du, au=au))

    async def rapport_salaison(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_salaison(du=du, au=au))

    async def rapport_receptions(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_receptions(du=du, au=au))

    async def rapport_nettoyage(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_nettoyage(du=du, au=au))

    async def rapport_nuisibles(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_nuisibles(du=du, au=au))

    async def rapport_dechets(self, *, du: date, au: date) -> bytes:
        return self._render_pdf(await self.donnees_dechets(du=du, au=au))

    async def rapport_plan_haccp(self) -> bytes:
        return self._render_pdf(await self.donnees_plan_haccp())

    async def donnees_temperatures(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(ReleveTemperature, PointTemperature)
            .join(PointTemperature, PointTemperature.id == ReleveTemperature.point_temperature_id)
            .where(ReleveTemperature.releve_le >= _borne_debut(du))
            .where(ReleveTemperature.releve_le < _borne_fin_exclue(au))
            .order_by(ReleveTemperature.releve_le.asc())
        )
        lignes: list[list[str]] = []
        conformes = 0
        total = 0
        for releve, point in res.all():
            total += 1
            conformes += 1 if releve.conforme else 0
            lignes.append(
                [
                    releve.releve_le.strftime("%d.%m.%Y %H:%M"),
                    _tronquer(point.nom, 30),
                    f"{releve.temperature:.1f}",
                    f"{point.temperature_min:g} / {point.temperature_max:g}",
                    "OK" if releve.conforme else "NON CONFORME",
                ]
            )

        return DonneesRapport(
            titre="Registre des températures",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Point", 55),
                Colonne("T (°C)", 140, alignement_droite=True),
                Colonne("Min / Max", 150),
                Colonne("Statut", 190),
            ],
            lignes=lignes,
            synthese=[
                f"Relevés : {total}",
                f"Conformes : {conformes} ({pourcentage(conformes, total)}%)",
                f"Non conformes : {total - conformes} ({pourcentage(total - conformes, total)}%)",
            ],
        )

    async def donnees_audits(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(EnregistrementAudit, ChecklistAudit)
            .join(ChecklistAudit, ChecklistAudit.id == EnregistrementAudit.checklist_id)
            .where(EnregistrementAudit.date_audit >= _borne_debut(du))
            .where(EnregistrementAudit.date_audit < _borne_fin_exclue(au))
            .order_by(EnregistrementAudit.date_audit.asc())
        )
        lignes: list[list[str]] = []
        scores: list[float] = []
        for enregistrement, checklist in res.all():
            scores.append(float(enregistrement.score))
            lignes.append(
                [
                    enregistrement.date_audit.strftime("%d.%m.%Y"),
                    _tronquer(checklist.nom, 30),
                    _tronquer(enregistrement.auditeur, 20),
                    f"{float(enregistrement.score):.1f}%",
                    _tronquer(enregistrement.constatations, 45),
                ]
            )

        moyenne = round(sum(scores) / len(scores), 1) if scores else 0.0
        return DonneesRapport(
            titre="Registre des audits internes",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Checklist", 45),
                Colonne("Auditeur", 115),
                Colonne("Score", 170, alignement_droite=True),
                Colonne("Constatations", 180),
            ],
            lignes=lignes,
            synthese=[f"Audits : {len(scores)}", f"Score moyen : {moyenne:.1f}%"],
        )

    async def donnees_production(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(LotProduction, Produit.nom)
            .join(Produit, Produit.id == LotProduction.produit_id)
            .where(LotProduction.date_production >= du)
            .where(LotProduction.date_production <= au)
            .order_by(LotProduction.date_production.asc(), LotProduction.numero_lot.asc())
        )
        lignes: list[list[str]] = []
        cuits = 0
        conformes = 0
        for lot, nom_produit in res.all():
            if lot.temperature_conforme is not None:
                cuits += 1
                conformes += 1 if lot.temperature_conforme else 0
            lignes.append(
                [
                    lot.date_production.strftime("%d.%m.%Y"),
                    lot.numero_lot,
                    _tronquer(nom_produit, 30),
                    f"{lot.quantite:g} {lot.unite}",
                    f"{lot.temperature_finale:.1f}" if lot.temperature_finale is not None else "-",
                    lot.statut.value,
                ]
            )

        return DonneesRapport(
            titre="Registre de production",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Lot", 45),
                Colonne("Produit", 80),
                Colonne("Quantité", 155, alignement_droite=True),
                Colonne("T finale", 185, alignement_droite=True),
                Colonne("Statut", 195),
            ],
            lignes=lignes,
            synthese=[
                f"Lots : {len(lignes)}",
                f"Traitement thermique conforme : {conformes}/{cuits} ({pourcentage(conformes, cuits)}%)",
            ],
        )

    async def donnees_salaison(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(LotSalaison)
            .where(LotSalaison.date_debut >= du)
            .where(LotSalaison.date_debut <= au)
            .order_by(LotSalaison.date_debut.asc())
        )
        lignes: list[list[str]] = []
        for lot in res.scalars().all():
            if lot.pourcentage_sel_nitrite is not None:
                dosage = f"{lot.pourcentage_sel_nitrite:g}% sel"
            else:
                dosage = f"saumure {lot.saumure_eau or 0:g}/{lot.saumure_sel or 0:g}"
            lignes.append(
                [
                    lot.numero_lot,
                    _tronquer(lot.nom_produit, 30),
                    f"{lot.quantite:g} {lot.unite}",
                    lot.methode.value,
                    dosage,
                    lot.date_debut.strftime("%d.%m.%Y"),
                    (lot.date_fin_reelle or lot.date_fin_prevue).strftime("%d.%m.%Y"),
                    lot.statut.value,
                ]
            )

        return DonneesRapport(
            titre="Registre de salaison",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Lot", 15),
                Colonne("Produit", 40),
                Colonne("Quantité", 115, alignement_droite=True),
                Colonne("Méthode", 120),
                Colonne("Dosage", 145),
                Colonne("Début", 185),
                Colonne("Fin", 210),
                Colonne("Statut", 235),
            ],
            lignes=lignes,
            synthese=[f"Lots : {len(lignes)}"],
        )

    async def donnees_receptions(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(ReceptionMatierePremiere, MatierePremiere.nom, Fournisseur.nom)
            .join(MatierePremiere, MatierePremiere.id == ReceptionMatierePremiere.matiere_premiere_id)
            .join(Fournisseur, Fournisseur.id == ReceptionMatierePremiere.fournisseur_id)
            .where(ReceptionMatierePremiere.recue_le >= _borne_debut(du))
            .where(ReceptionMatierePremiere.recue_le < _borne_fin_exclue(au))
            .order_by(ReceptionMatierePremiere.recue_le.asc())
        )
        lignes: list[list[str]] = []
        conformes = 0
        for reception, nom_matiere, nom_fournisseur in res.all():
            conformes += 1 if reception.conforme else 0
            lignes.append(
                [
                    reception.recue_le.strftime("%d.%m.%Y %H:%M"),
                    _tronquer(nom_matiere, 25),
                    _tronquer(nom_fournisseur, 25),
                    _tronquer(reception.numero_lot, 18),
                    f"{reception.quantite:g} {reception.unite}",
                    f"{reception.temperature:.1f}" if reception.temperature is not None else "-",
                    "OK" if reception.conforme else "NON CONFORME",
                ]
            )

        total = len(lignes)
        return DonneesRapport(
            titre="Registre de réception des matières premières",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Matière", 50),
                Colonne("Fournisseur", 100),
                Colonne("Lot", 150),
                Colonne("Quantité", 205, alignement_droite=True),
                Colonne("T (°C)", 225, alignement_droite=True),
                Colonne("Statut", 235),
            ],
            lignes=lignes,
            synthese=[
                f"Réceptions : {total}",
                f"Conformes : {conformes} ({pourcentage(conformes, total)}%)",
                f"Non conformes : {total - conformes} ({pourcentage(total - conformes, total)}%)",
            ],
        )

    async def donnees_nettoyage(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(EnregistrementNettoyage, ZoneNettoyage.nom)
            .join(ZoneNettoyage, ZoneNettoyage.id == EnregistrementNettoyage.zone_nettoyage_id)
            .where(EnregistrementNettoyage.nettoye_le >= _borne_debut(du))
            .where(EnregistrementNettoyage.nettoye_le < _borne_fin_exclue(au))
            .order_by(EnregistrementNettoyage.nettoye_le.asc())
        )
        lignes: list[list[str]] = []
        verifies = 0
        for enregistrement, nom_zone in res.all():
            verifies += 1 if enregistrement.verifie else 0
            lignes.append(
                [
                    enregistrement.nettoye_le.strftime("%d.%m.%Y %H:%M"),
                    _tronquer(nom_zone, 30),
                    _tronquer(enregistrement.methode, 30),
                    _tronquer(enregistrement.produits_chimiques, 30),
                    "OUI" if enregistrement.verifie else "NON",
                    _tronquer(enregistrement.notes, 35),
                ]
            )

        return DonneesRapport(
            titre="Registre de nettoyage et désinfection",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Zone", 50),
                Colonne("Méthode", 105),
                Colonne("Produits", 160),
                Colonne("Vérifié", 215),
                Colonne("Notes", 232),
            ],
            lignes=lignes,
            synthese=[
                f"Nettoyages : {len(lignes)}",
                f"Vérifiés : {verifies}/{len(lignes)} ({pourcentage(verifies, len(lignes))}%)",
            ],
        )

    async def donnees_nuisibles(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(ControleNuisibles, PointNuisibles)
            .join(PointNuisibles, PointNuisibles.id == ControleNuisibles.point_nuisibles_id)
            .where(ControleNuisibles.controle_le >= _borne_debut(du))
            .where(ControleNuisibles.controle_le < _borne_fin_exclue(au))
            .order_by(ControleNuisibles.controle_le.asc())
        )
        lignes: list[list[str]] = []
        avec_action = 0
        for controle, point in res.all():
            avec_action += 1 if priorite_controle_nuisibles(controle.statut) is not None else 0
            constat = " / ".join(t for t in (controle.constatations, controle.action_menee) if t)
            lignes.append(
                [
                    controle.controle_le.strftime("%d.%m.%Y %H:%M"),
                    _tronquer(point.nom, 25),
                    point.type_point.value,
                    _tronquer(point.emplacement, 25),
                    controle.statut.value,
                    _tronquer(constat, 40),
                ]
            )

        return DonneesRapport(
            titre="Registre de lutte contre les nuisibles",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Point", 50),
                Colonne("Type", 95),
                Colonne("Emplacement", 130),
                Colonne("Statut", 175),
                Colonne("Constatations / actions", 215),
            ],
            lignes=lignes,
            synthese=[
                f"Contrôles : {len(lignes)}",
                f"Activité ou intervention requise : {avec_action}",
            ],
        )

    async def donnees_dechets(self, *, du: date, au: date) -> DonneesRapport:
        self._verifier_periode(du, au)

        res = await self._session.execute(
            select(EnregistrementDechet, TypeDechet, CollecteurDechets.nom)
            .join(TypeDechet, TypeDechet.id == EnregistrementDechet.type_dechet_id)
            .outerjoin(CollecteurDechets, CollecteurDechets.id == EnregistrementDechet.collecteur_id)
            .where(EnregistrementDechet.date_collecte >= du)
            .where(EnregistrementDechet.date_collecte <= au)
            .order_by(EnregistrementDechet.date_collecte.asc())
        )
        lignes: list[list[str]] = []
        totaux: dict[tuple[str, str], float] = defaultdict(float)
        for enregistrement, type_dechet, nom_collecteur in res.all():
            totaux[(type_dechet.nom, enregistrement.unite)] += enregistrement.quantite
            lignes.append(
                [
                    enregistrement.date_collecte.strftime("%d.%m.%Y"),
                    _tronquer(type_dechet.nom, 25),
                    _tronquer(type_dechet.categorie, 20),
                    f"{enregistrement.quantite:g} {enregistrement.unite}",
                    _tronquer(nom_collecteur, 30),
                    _tronquer(enregistrement.numero_document, 20),
                ]
            )

        return DonneesRapport(
            titre="Registre des déchets (sous-produits animaux)",
            entreprise=await self._nom_entreprise(),
            du=du,
            au=au,
            colonnes=[
                Colonne("Date", 15),
                Colonne("Type", 45),
                Colonne("Catégorie", 95),
                Colonne("Quantité", 160, alignement_droite=True),
                Colonne("Collecteur", 170),
                Colonne("N° document", 235),
            ],
            lignes=lignes,
            synthese=[f"Enlèvements : {len(lignes)}"]
            + [f"Total {nom} : {quantite:g} {unite}" for (nom, unite), quantite in sorted(totaux.items())],
        )

    async def donnees_plan_haccp(self) -> DonneesRapport:
        """Analyse des dangers, puis les CCP actifs en synthèse."""

        res_ccp = await self._session.execute(
            select(CCP).where(CCP.actif.is_(True)).order_by(CCP.code.asc(), CCP.nom.asc())
        )
        ccps = list(res_ccp.scalars().all())
        codes = {ccp.id: ccp.code or ccp.nom for ccp in ccps}

        res = await self._session.execute(select(Danger).order_by(Danger.significativite.desc(), Danger.nom.asc()))
        lignes: list[list[str]] = []
        for danger in res.scalars().all():
            lignes.append(
                [
                    _tronquer(danger.nom, 30),
                    danger.type_danger.value,
                    _tronquer(danger.etape_procede, 20),
                    f"{danger.gravite.value} x {danger.probabilite.value}",
                    str(danger.significativite),
                    _tronquer(codes.get(danger.ccp_id), 12),
                    _tronquer(danger.mesure_preventive, 35),
                ]
            )

        synthese = [f"Dangers analysés : {len(lignes)}", f"CCP actifs : {len(ccps)}"]
        for ccp in ccps:
            synthese.append(
                _tronquer(
                    f"{ccp.code or '-'} {ccp.nom} | limite : {ccp.limite_critique or '-'}"
                    f" | surveillance : {ccp.methode_surveillance or '-'}"
                    f" | action : {ccp.action_corrective or '-'}",
                    150,
                )
            )

        return DonneesRapport(
            titre="Plan HACCP",
            entreprise=await self._nom_entreprise(),
            du=None,
            au=None,
            colonnes=[
                Colonne("Danger", 15),
                Colonne("Type", 70),
                Colonne("Étape", 100),
                Colonne("Gravité x Prob.", 140),
                Colonne("Score", 185, alignement_droite=True),
                Colonne("CCP", 190),
                Colonne("Mesure préventive", 212),
            ],
            lignes=lignes,
            synthese=synthese,
        )

    async def _nom_entreprise(self) -> str:
        res = await self._session.execute(select(ParametresEntreprise).limit(1))
        parametres = res.scalar_one_or_none()
        if parametres is None:
            return "Masarnia"
        if parametres.numero_veterinaire:
            return f"{parametres.nom_entreprise} (n° vétérinaire {parametres.numero_veterinaire})"
        return parametres.nom_entreprise

    @staticmethod
    def _verifier_periode(du: date, au: date) -> None:
        if du > au:
            raise PeriodeInvalide("La date de début doit précéder la date de fin.")

    @staticmethod
    def _render_pdf(donnees: DonneesRapport) -> bytes:
        buffer = BytesIO()
        taille = landscape(A4)
        c = canvas.Canvas(buffer, pagesize=taille)
        _largeur, hauteur = taille

        def entete() -> float:
            y = hauteur - 15 * mm
            c.setFont("Helvetica-Bold", 14)
            c.drawString(15 * mm, y, donnees.titre)
            y -= 6 * mm
            c.setFont("Helvetica", 9)
            c.drawString(15 * mm, y, donnees.entreprise)
            y -= 5 * mm
            if donnees.du is not None and donnees.au is not None:
                ligne_date = f"Période : {donnees.du.strftime('%d.%m.%Y')} - {donnees.au.strftime('%d.%m.%Y')}"
            else:
                ligne_date = f"Édité le {date.today().strftime('%d.%m.%Y')}"
            c.drawString(15 * mm, y, ligne_date)

            y -= 9 * mm
            c.setFont("Helvetica-Bold", 9)
            for colonne in donnees.colonnes:
                if colonne.alignement_droite:
                    c.drawRightString(colonne.x_mm * mm, y, colonne.libelle)
                else:
                    c.drawString(colonne.x_mm * mm, y, colonne.libelle)
            c.setFont("Helvetica", 9)
            return y - 6 * mm

        y = entete()
        for ligne in donnees.lignes:
            if y < 20 * mm:
                c.showPage()
                y = entete()

            for colonne, valeur in zip(donnees.colonnes, ligne):
                if colonne.alignement_droite:
                    c.drawRightString(colonne.x_mm * mm, y, valeur)
                else:
                    c.drawString(colonne.x_mm * mm, y, valeur)
            y -= 5 * mm

        y -= 6 * mm
        c.setFont("Helvetica-Bold", 10)
        for ligne_synthese in donnees.synthese:
            if y < 15 * mm:
                c.showPage()
                y = hauteur - 15 * mm
                c.setFont("Helvetica-Bold", 10)
            c.drawString(15 * mm, y, ligne_synthese)
            y -= 5 * mm

        c.showPage()
        c.save()
        return buffer.getvalue()
