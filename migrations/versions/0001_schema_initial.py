"""schéma initial du registre HACCP

Revision ID: 0001_schema_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_schema_initial"
down_revision = None
branch_labels = None
depends_on = None


JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True, nullable=False)


def _horodatage() -> list[sa.Column]:
    return [
        sa.Column("cree_le", sa.DateTime(timezone=True), nullable=False),
        sa.Column("mis_a_jour_le", sa.DateTime(timezone=True), nullable=False),
    ]


def _utilisateur_id() -> sa.Column:
    return sa.Column("utilisateur_id", sa.Uuid(), sa.ForeignKey("utilisateur.id"), nullable=True)


def upgrade() -> None:
    # ===== Socle =====
    op.create_table(
        "utilisateur",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("mot_de_passe_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("actif", sa.Boolean(), nullable=False),
        sa.Column("dernier_login_le", sa.DateTime(timezone=True), nullable=True),
        *_horodatage(),
    )
    op.create_index("ix_utilisateur_email", "utilisateur", ["email"], unique=True)

    op.create_table(
        "journal_audit",
        _id(),
        sa.Column(
            "utilisateur_id",
            sa.Uuid(),
            sa.ForeignKey("utilisateur.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("cree_le", sa.DateTime(timezone=True), nullable=False),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("ressource", sa.String(length=120), nullable=False),
        sa.Column("methode_http", sa.String(length=20), nullable=True),
        sa.Column("chemin", sa.String(length=300), nullable=True),
        sa.Column("statut_http", sa.Integer(), nullable=True),
        sa.Column("donnees", JSON, nullable=True),
        sa.Column("ip", sa.String(length=60), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
    )
    op.create_index("ix_journal_audit_utilisateur_id", "journal_audit", ["utilisateur_id"], unique=False)

    # ===== Référentiel =====
    op.create_table(
        "fournisseur",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("adresse", sa.String(length=300), nullable=True),
        sa.Column("telephone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("numero_veterinaire", sa.String(length=50), nullable=True),
        sa.Column("contact", sa.String(length=200), nullable=True),
        sa.Column("agree", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "matiere_premiere",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("categorie", sa.String(length=50), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("fournisseur_id", sa.Uuid(), sa.ForeignKey("fournisseur.id"), nullable=True),
        sa.Column("conditions_stockage", sa.String(length=300), nullable=True),
        sa.Column("duree_conservation_jours", sa.Integer(), nullable=True),
        sa.Column("allergenes", sa.String(length=300), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "materiau",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("categorie", sa.String(length=50), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("fournisseur_id", sa.Uuid(), sa.ForeignKey("fournisseur.id"), nullable=True),
        sa.Column("stock_minimum", sa.Float(), nullable=True),
        sa.Column("stock_actuel", sa.Float(), nullable=False),
        sa.Column("conditions_stockage", sa.String(length=300), nullable=True),
        sa.Column("allergenes", sa.String(length=300), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "produit",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("categorie", sa.String(length=120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("duree_conservation_jours", sa.Integer(), nullable=False),
        sa.Column("temperature_stockage", sa.String(length=50), nullable=True),
        sa.Column("allergenes", sa.String(length=300), nullable=True),
        sa.Column("temperature_requise", sa.Float(), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "parametres_entreprise",
        _id(),
        sa.Column("nom_entreprise", sa.String(length=200), nullable=False),
        sa.Column("adresse", sa.String(length=300), nullable=True),
        sa.Column("numero_veterinaire", sa.String(length=50), nullable=True),
        sa.Column("telephone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("largeur_etiquette_mm", sa.Integer(), nullable=False),
        sa.Column("hauteur_etiquette_mm", sa.Integer(), nullable=False),
        *_horodatage(),
    )

    # ===== Plan HACCP =====
    op.create_table(
        "ccp",
        _id(),
        sa.Column("code", sa.String(length=20), nullable=True, unique=True),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type_danger", sa.String(length=50), nullable=True),
        sa.Column("limite_critique", sa.String(length=300), nullable=True),
        sa.Column("methode_surveillance", sa.String(length=300), nullable=True),
        sa.Column("frequence_surveillance", sa.String(length=120), nullable=True),
        sa.Column("action_corrective", sa.Text(), nullable=True),
        sa.Column("verification", sa.Text(), nullable=True),
        sa.Column("enregistrements", sa.Text(), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "danger",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("type_danger", sa.String(length=50), nullable=False),
        sa.Column("source", sa.String(length=300), nullable=True),
        sa.Column("mesure_preventive", sa.Text(), nullable=True),
        sa.Column("gravite", sa.String(length=50), nullable=False),
        sa.Column("probabilite", sa.String(length=50), nullable=False),
        sa.Column("significativite", sa.Integer(), nullable=False),
        sa.Column("etape_procede", sa.String(length=200), nullable=True),
        sa.Column("ccp_id", sa.Uuid(), sa.ForeignKey("ccp.id"), nullable=True),
        *_horodatage(),
    )
    op.create_table(
        "action_corrective",
        _id(),
        sa.Column("titre", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("cause", sa.Text(), nullable=True),
        sa.Column("action_menee", sa.Text(), nullable=True),
        sa.Column("statut", sa.String(length=50), nullable=False),
        sa.Column("priorite", sa.String(length=50), nullable=False),
        sa.Column("echeance", sa.Date(), nullable=True),
        sa.Column("realisee_le", sa.DateTime(timezone=True), nullable=True),
        sa.Column("origine", sa.String(length=50), nullable=False),
        sa.Column("reference", sa.String(length=120), nullable=True),
        sa.Column("ccp_id", sa.Uuid(), sa.ForeignKey("ccp.id"), nullable=True),
        _utilisateur_id(),
        *_horodatage(),
    )
    op.create_index("ix_action_corrective_reference", "action_corrective", ["reference"], unique=False)

    # ===== Réceptions =====
    op.create_table(
        "reception_matiere_premiere",
        _id(),
        sa.Column("matiere_premiere_id", sa.Uuid(), sa.ForeignKey("matiere_premiere.id"), nullable=False),
        sa.Column("fournisseur_id", sa.Uuid(), sa.ForeignKey("fournisseur.id"), nullable=False),
        sa.Column("numero_lot", sa.String(length=120), nullable=False),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("date_peremption", sa.Date(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("conforme", sa.Boolean(), nullable=False),
        sa.Column("vehicule_propre", sa.Boolean(), nullable=True),
        sa.Column("temperature_vehicule", sa.Float(), nullable=True),
        sa.Column("emballage_intact", sa.Boolean(), nullable=True),
        sa.Column("documents_complets", sa.Boolean(), nullable=True),
        sa.Column("numero_document", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recue_le", sa.DateTime(timezone=True), nullable=False),
        _utilisateur_id(),
        *_horodatage(),
    )
    op.create_table(
        "reception_materiau",
        _id(),
        sa.Column("materiau_id", sa.Uuid(), sa.ForeignKey("materiau.id"), nullable=False),
        sa.Column("fournisseur_id", sa.Uuid(), sa.ForeignKey("fournisseur.id"), nullable=True),
        sa.Column("numero_lot", sa.String(length=120), nullable=False),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("date_peremption", sa.Date(), nullable=True),
        sa.Column("prix_unitaire", sa.Float(), nullable=True),
        sa.Column("numero_document", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recue_le", sa.DateTime(timezone=True), nullable=False),
        *_horodatage(),
    )
    op.create_index("ix_reception_materiau_fifo", "reception_materiau", ["materiau_id", "recue_le"], unique=False)

    # ===== Salaison, découpe, production =====
    op.create_table(
        "lot_salaison",
        _id(),
        sa.Column("numero_lot", sa.String(length=50), nullable=False, unique=True),
        sa.Column("reception_id", sa.Uuid(), sa.ForeignKey("reception_matiere_premiere.id"), nullable=True),
        sa.Column("nom_produit", sa.String(length=200), nullable=False),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("methode", sa.String(length=50), nullable=False),
        sa.Column("description_viande", sa.String(length=300), nullable=True),
        sa.Column("pourcentage_sel_nitrite", sa.Float(), nullable=True),
        sa.Column("saumure_eau", sa.Float(), nullable=True),
        sa.Column("saumure_sel", sa.Float(), nullable=True),
        sa.Column("saumure_maggi", sa.Float(), nullable=True),
        sa.Column("saumure_sucre", sa.Float(), nullable=True),
        sa.Column("date_debut", sa.Date(), nullable=False),
        sa.Column("date_fin_prevue", sa.Date(), nullable=False),
        sa.Column("date_fin_reelle", sa.Date(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("statut", sa.String(length=50), nullable=False),
        _utilisateur_id(),
        *_horodatage(),
    )
    op.create_table(
        "decoupe",
        _id(),
        sa.Column("reception_id", sa.Uuid(), sa.ForeignKey("reception_matiere_premiere.id"), nullable=True),
        sa.Column("numero_lot", sa.String(length=120), nullable=False),
        sa.Column("date_decoupe", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_horodatage(),
    )
    op.create_table(
        "element_decoupe",
        _id(),
        sa.Column("decoupe_id", sa.Uuid(), sa.ForeignKey("decoupe.id", ondelete="CASCADE"), nullable=False),
        sa.Column("nom_element", sa.String(length=200), nullable=False),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("destination", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        *_horodatage(),
    )
    op.create_index("ix_element_decoupe_decoupe_id", "element_decoupe", ["decoupe_id"], unique=False)

    op.create_table(
        "lot_production",
        _id(),
        sa.Column("numero_lot", sa.String(length=50), nullable=False),
        sa.Column("produit_id", sa.Uuid(), sa.ForeignKey("produit.id"), nullable=False),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("date_production", sa.Date(), nullable=False),
        sa.Column("date_peremption", sa.Date(), nullable=False),
        sa.Column("heure_debut", sa.DateTime(timezone=True), nullable=True),
        sa.Column("heure_fin", sa.DateTime(timezone=True), nullable=True),
        sa.Column("temperature_finale", sa.Float(), nullable=True),
        sa.Column("temperature_conforme", sa.Boolean(), nullable=True),
        sa.Column("statut", sa.String(length=50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("operateur_id", sa.Uuid(), sa.ForeignKey("utilisateur.id"), nullable=True),
        *_horodatage(),
        sa.UniqueConstraint("produit_id", "numero_lot", name="uq_lot_production_produit_numero"),
    )
    op.create_index("ix_lot_production_numero_lot", "lot_production", ["numero_lot"], unique=False)

    op.create_table(
        "ligne_matiere_lot",
        _id(),
        sa.Column(
            "lot_production_id",
            sa.Uuid(),
            sa.ForeignKey("lot_production.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type_source", sa.String(length=50), nullable=False),
        sa.Column("matiere_premiere_id", sa.Uuid(), sa.ForeignKey("matiere_premiere.id"), nullable=True),
        sa.Column("reception_id", sa.Uuid(), sa.ForeignKey("reception_matiere_premiere.id"), nullable=True),
        sa.Column("lot_salaison_id", sa.Uuid(), sa.ForeignKey("lot_salaison.id"), nullable=True),
        sa.Column("materiau_id", sa.Uuid(), sa.ForeignKey("materiau.id"), nullable=True),
        sa.Column("reception_materiau_id", sa.Uuid(), sa.ForeignKey("reception_materiau.id"), nullable=True),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        *_horodatage(),
        sa.CheckConstraint(
            "(type_source = 'RAW_MATERIAL' AND matiere_premiere_id IS NOT NULL"
            " AND lot_salaison_id IS NULL AND materiau_id IS NULL)"
            " OR (type_source = 'CURING_BATCH' AND lot_salaison_id IS NOT NULL"
            " AND matiere_premiere_id IS NULL AND materiau_id IS NULL)"
            " OR (type_source = 'MATERIAL' AND materiau_id IS NOT NULL"
            " AND matiere_premiere_id IS NULL AND lot_salaison_id IS NULL)",
            name="ck_ligne_matiere_lot_source_unique",
        ),
    )
    op.create_index("ix_ligne_matiere_lot_lot_production_id", "ligne_matiere_lot", ["lot_production_id"], unique=False)

    # ===== Hygiène =====
    op.create_table(
        "point_temperature",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("emplacement", sa.String(length=200), nullable=True),
        sa.Column("type_point", sa.String(length=50), nullable=False),
        sa.Column("temperature_min", sa.Float(), nullable=False),
        sa.Column("temperature_max", sa.Float(), nullable=False),
        sa.Column("ccp_id", sa.Uuid(), sa.ForeignKey("ccp.id"), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "releve_temperature",
        _id(),
        sa.Column("point_temperature_id", sa.Uuid(), sa.ForeignKey("point_temperature.id"), nullable=False),
        sa.Column("temperature", sa.Float(), nullable=False),
        sa.Column("conforme", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("releve_le", sa.DateTime(timezone=True), nullable=False),
        _utilisateur_id(),
        *_horodatage(),
    )
    op.create_index(
        "ix_releve_temperature_point_date",
        "releve_temperature",
        ["point_temperature_id", "releve_le"],
        unique=False,
    )
    op.create_table(
        "zone_nettoyage",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("emplacement", sa.String(length=200), nullable=True),
        sa.Column("frequence", sa.String(length=50), nullable=False),
        sa.Column("methode", sa.String(length=300), nullable=True),
        sa.Column("produits_chimiques", sa.String(length=300), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "enregistrement_nettoyage",
        _id(),
        sa.Column("zone_nettoyage_id", sa.Uuid(), sa.ForeignKey("zone_nettoyage.id"), nullable=False),
        sa.Column("methode", sa.String(length=300), nullable=True),
        sa.Column("produits_chimiques", sa.String(length=300), nullable=True),
        sa.Column("verifie", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("nettoye_le", sa.DateTime(timezone=True), nullable=False),
        _utilisateur_id(),
        *_horodatage(),
    )
    op.create_table(
        "point_nuisibles",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("emplacement", sa.String(length=200), nullable=True),
        sa.Column("type_point", sa.String(length=50), nullable=False),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "controle_nuisibles",
        _id(),
        sa.Column("point_nuisibles_id", sa.Uuid(), sa.ForeignKey("point_nuisibles.id"), nullable=False),
        sa.Column("statut", sa.String(length=50), nullable=False),
        sa.Column("constatations", sa.Text(), nullable=True),
        sa.Column("action_menee", sa.Text(), nullable=True),
        sa.Column("controle_le", sa.DateTime(timezone=True), nullable=False),
        _utilisateur_id(),
        *_horodatage(),
    )

    # ===== Audits =====
    op.create_table(
        "checklist_audit",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("categorie", sa.String(length=120), nullable=True),
        sa.Column("points", JSON, nullable=False),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "enregistrement_audit",
        _id(),
        sa.Column("checklist_id", sa.Uuid(), sa.ForeignKey("checklist_audit.id"), nullable=False),
        sa.Column("auditeur", sa.String(length=200), nullable=False),
        sa.Column("resultats", JSON, nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("constatations", sa.Text(), nullable=True),
        sa.Column("recommandations", sa.Text(), nullable=True),
        sa.Column("date_audit", sa.DateTime(timezone=True), nullable=False),
        _utilisateur_id(),
        *_horodatage(),
    )

    # ===== Formation, documents =====
    op.create_table(
        "formation",
        _id(),
        sa.Column("titre", sa.String(length=200), nullable=False),
        sa.Column("type_formation", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("formateur", sa.String(length=200), nullable=True),
        sa.Column("date_formation", sa.Date(), nullable=False),
        sa.Column("valide_jusqu_au", sa.Date(), nullable=True),
        *_horodatage(),
    )
    op.create_table(
        "participant_formation",
        _id(),
        sa.Column("formation_id", sa.Uuid(), sa.ForeignKey("formation.id", ondelete="CASCADE"), nullable=False),
        sa.Column("utilisateur_id", sa.Uuid(), sa.ForeignKey("utilisateur.id"), nullable=False),
        sa.Column("reussi", sa.Boolean(), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        *_horodatage(),
        sa.UniqueConstraint("formation_id", "utilisateur_id", name="uq_participant_formation"),
    )
    op.create_index("ix_participant_formation_formation_id", "participant_formation", ["formation_id"], unique=False)

    op.create_table(
        "document",
        _id(),
        sa.Column("titre", sa.String(length=300), nullable=False),
        sa.Column("categorie", sa.String(length=50), nullable=False),
        sa.Column("nom_fichier", sa.String(length=300), nullable=True),
        sa.Column("chemin_fichier", sa.String(length=500), nullable=True),
        sa.Column("version", sa.String(length=20), nullable=False),
        sa.Column("valide_du", sa.Date(), nullable=True),
        sa.Column("valide_au", sa.Date(), nullable=True),
        sa.Column("depose_par_id", sa.Uuid(), sa.ForeignKey("utilisateur.id"), nullable=True),
        *_horodatage(),
    )

    # ===== Laboratoire =====
    op.create_table(
        "type_analyse_labo",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("categorie", sa.String(length=120), nullable=False),
        sa.Column("unite", sa.String(length=50), nullable=True),
        sa.Column("norme_min", sa.Float(), nullable=True),
        sa.Column("norme_max", sa.Float(), nullable=True),
        sa.Column("norme_texte", sa.String(length=300), nullable=True),
        sa.Column("frequence", sa.String(length=120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "analyse_labo",
        _id(),
        sa.Column("type_analyse_id", sa.Uuid(), sa.ForeignKey("type_analyse_labo.id"), nullable=False),
        sa.Column("date_prelevement", sa.Date(), nullable=False),
        sa.Column("date_resultat", sa.Date(), nullable=True),
        sa.Column("origine_echantillon", sa.String(length=200), nullable=True),
        sa.Column("lot_echantillon", sa.String(length=120), nullable=True),
        sa.Column("resultat", sa.String(length=300), nullable=True),
        sa.Column("valeur_resultat", sa.Float(), nullable=True),
        sa.Column("conforme", sa.Boolean(), nullable=True),
        sa.Column("laboratoire", sa.String(length=200), nullable=True),
        sa.Column("numero_document", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _utilisateur_id(),
        *_horodatage(),
    )

    # ===== Déchets =====
    op.create_table(
        "type_dechet",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("categorie", sa.String(length=120), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "collecteur_dechets",
        _id(),
        sa.Column("nom", sa.String(length=200), nullable=False),
        sa.Column("adresse", sa.String(length=300), nullable=True),
        sa.Column("telephone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("numero_veterinaire", sa.String(length=50), nullable=True),
        sa.Column("numero_contrat", sa.String(length=120), nullable=True),
        sa.Column("contact", sa.String(length=200), nullable=True),
        sa.Column("actif", sa.Boolean(), nullable=False),
        *_horodatage(),
    )
    op.create_table(
        "enregistrement_dechet",
        _id(),
        sa.Column("type_dechet_id", sa.Uuid(), sa.ForeignKey("type_dechet.id"), nullable=False),
        sa.Column("collecteur_id", sa.Uuid(), sa.ForeignKey("collecteur_dechets.id"), nullable=True),
        sa.Column("quantite", sa.Float(), nullable=False),
        sa.Column("unite", sa.String(length=20), nullable=False),
        sa.Column("date_collecte", sa.Date(), nullable=False),
        sa.Column("numero_document", sa.String(length=120), nullable=True),
        sa.Column("vehicule", sa.String(length=120), nullable=True),
        sa.Column("chauffeur", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _utilisateur_id(),
        *_horodatage(),
    )


def downgrade() -> None:
    for table in (
        "enregistrement_dechet",
        "collecteur_dechets",
        "type_dechet",
        "analyse_labo",
        "type_analyse_labo",
        "document",
        "participant_formation",
        "formation",
        "enregistrement_audit",
        "checklist_audit",
        "controle_nuisibles",
        "point_nuisibles",
        "enregistrement_nettoyage",
        "zone_nettoyage",
        "releve_temperature",
        "point_temperature",
        "ligne_matiere_lot",
        "lot_production",
        "element_decoupe",
        "decoupe",
        "lot_salaison",
        "reception_materiau",
        "reception_matiere_premiere",
        "action_corrective",
        "danger",
        "ccp",
        "parametres_entreprise",
        "produit",
        "materiau",
        "matiere_premiere",
        "fournisseur",
        "journal_audit",
        "utilisateur",
    ):
        op.drop_table(table)
