"""
Pytest fixtures for UniSearch tests.

Provides in-memory SQLite databases registered under the connection ids
the indexes use, and a default species configuration.
"""
import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from unisearch.core.species import SpeciesDefs
from unisearch.db.engine import EngineRegistry


def _concat(*values):
    """MySQL CONCAT: NULL if any argument is NULL."""
    if any(value is None for value in values):
        return None
    return "".join(str(value) for value in values)


def make_engine(*statements, rows=None, path=None):
    """
    Create a SQLite engine and run setup statements.

    In memory unless ``path`` is given; a file database gives every thread
    its own connection. ``rows`` maps an INSERT statement to a list of
    parameter dicts.
    """
    if path is None:
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            f"sqlite:///{path}",
            connect_args={"check_same_thread": False},
        )

    @event.listens_for(engine, "connect")
    def _register_functions(dbapi_connection, connection_record):
        dbapi_connection.create_function("concat", -1, _concat)

    with engine.begin() as conn:
        for statement in statements:
            conn.execute(text(statement))
        for insert, params in (rows or {}).items():
            conn.execute(text(insert), params)
    return engine


@pytest.fixture
def species():
    """Human species configuration with every index enabled."""
    return SpeciesDefs(name="Homo_sapiens", species_path="/Homo_sapiens")


@pytest.fixture
def registry():
    """Registry with no databases configured."""
    reg = EngineRegistry({})
    yield reg
    reg.dispose()


def _items_engine(path=None):
    items = (
        [{"name": f"a{i:02d}", "grp": "a"} for i in range(25)]
        + [{"name": f"b{i:02d}", "grp": "b"} for i in range(10)]
        + [{"name": f"c{i:02d}", "grp": "c"} for i in range(4)]
    )
    return make_engine(
        "CREATE TABLE item (name TEXT, grp TEXT)",
        rows={"INSERT INTO item (name, grp) VALUES (:name, :grp)": items},
        path=path,
    )


@pytest.fixture
def item_engine():
    """25 items in group 'a', 10 in group 'b', 4 in group 'c'."""
    return _items_engine()


@pytest.fixture
def threaded_item_engine(tmp_path):
    """The item database in a file, safe to query from worker threads."""
    engine = _items_engine(tmp_path / "items.db")
    yield engine
    engine.dispose()


@pytest.fixture
def core_engine():
    """Core database with sequence regions, a clone, markers, domains and QTLs."""
    return make_engine(
        "CREATE TABLE coord_system (coord_system_id INTEGER, name TEXT)",
        "CREATE TABLE seq_region (seq_region_id INTEGER, name TEXT,"
        " coord_system_id INTEGER, length INTEGER)",
        "CREATE TABLE attrib_type (attrib_type_id INTEGER, code TEXT)",
        "CREATE TABLE misc_attrib (misc_feature_id INTEGER, attrib_type_id INTEGER, value TEXT)",
        "CREATE TABLE misc_set (misc_set_id INTEGER, name TEXT)",
        "CREATE TABLE misc_feature_misc_set (misc_feature_id INTEGER, misc_set_id INTEGER)",
        "CREATE TABLE misc_feature (misc_feature_id INTEGER, seq_region_id INTEGER,"
        " seq_region_start INTEGER, seq_region_end INTEGER)",
        "CREATE TABLE marker_synonym (marker_synonym_id INTEGER, name TEXT)",
        "INSERT INTO coord_system VALUES (1, 'chromosome'), (2, 'clone')",
        "INSERT INTO seq_region VALUES (7, '7', 1, 159138663), (8, 'AC004983.1', 2, 180000)",
        "INSERT INTO attrib_type VALUES (1, 'clone_name'), (2, 'note')",
        "INSERT INTO misc_attrib VALUES (100, 1, 'RP11-1220K2'), (100, 2, 'RP11-1220K2 note')",
        "INSERT INTO misc_set VALUES (1, 'tilepath')",
        "INSERT INTO misc_feature_misc_set VALUES (100, 1)",
        "INSERT INTO misc_feature VALUES (100, 7, 1000, 2000)",
        "INSERT INTO marker_synonym VALUES (1, 'D7S1'), (2, 'D7S2'), (3, 'D7S2'), (4, 'RH1')",
        "CREATE TABLE external_db (external_db_id INTEGER, db_name TEXT)",
        "CREATE TABLE xref (xref_id INTEGER, external_db_id INTEGER, dbprimary_acc TEXT,"
        " display_label TEXT, description TEXT)",
        "INSERT INTO external_db VALUES (1, 'Interpro'), (2, 'Uniprot/SWISSPROT')",
        "INSERT INTO xref VALUES"
        " (1, 1, 'IPR000719', 'Prot_kinase_dom', 'Protein kinase domain'),"
        " (2, 1, 'IPR011009', 'Kinase-like_dom', 'Protein kinase-like domain'),"
        " (3, 2, 'P31749', 'AKT1_HUMAN', 'Protein kinase B')",
        "CREATE TABLE qtl (qtl_id INTEGER, trait TEXT)",
        "CREATE TABLE qtl_feature (qtl_id INTEGER, seq_region_id INTEGER,"
        " seq_region_start INTEGER, seq_region_end INTEGER)",
        "CREATE TABLE qtl_synonym (qtl_id INTEGER, source_primary_id TEXT)",
        "INSERT INTO qtl VALUES (1, 'Body weight'), (2, 'Fat content')",
        "INSERT INTO qtl_feature VALUES (1, 7, 5000, 9000), (2, 7, 100, 200)",
        rows={
            "INSERT INTO qtl_synonym VALUES (:qtl_id, :accession)": [
                {"qtl_id": 2, "accession": "RGD:61354"},
            ],
        },
    )


@pytest.fixture
def compara_engine():
    """Compara database with a few protein families."""
    return make_engine(
        "CREATE TABLE family (stable_id TEXT, description TEXT)",
        "INSERT INTO family VALUES ('ENSFM001', 'KINASE'), ('ENSFM002', 'KINESIN'),"
        " ('ENSFM003', 'BRCA2 REPAIR')",
    )


@pytest.fixture
def gene_engine():
    """Core database with BRCA2: gene, transcript, translation and its HGNC xref."""
    return make_engine(
        "CREATE TABLE gene (gene_id INTEGER, description TEXT)",
        "CREATE TABLE gene_stable_id (gene_id INTEGER, stable_id TEXT)",
        "CREATE TABLE transcript (transcript_id INTEGER, description TEXT)",
        "CREATE TABLE transcript_stable_id (transcript_id INTEGER, stable_id TEXT)",
        "CREATE TABLE translation (translation_id INTEGER, transcript_id INTEGER)",
        "CREATE TABLE translation_stable_id (translation_id INTEGER, stable_id TEXT)",
        "CREATE TABLE xref (xref_id INTEGER, external_db_id INTEGER, dbprimary_acc TEXT,"
        " display_label TEXT, description TEXT)",
        "CREATE TABLE object_xref (object_xref_id INTEGER, ensembl_id INTEGER,"
        " ensembl_object_type TEXT, xref_id INTEGER)",
        "CREATE TABLE external_synonym (xref_id INTEGER, synonym TEXT)",
        "INSERT INTO gene VALUES (1, 'breast cancer 2, early onset')",
        "INSERT INTO gene_stable_id VALUES (1, 'ENSG00000139618')",
        "INSERT INTO transcript VALUES (10, 'BRCA2-201')",
        "INSERT INTO transcript_stable_id VALUES (10, 'ENST00000380152')",
        "INSERT INTO translation VALUES (20, 10)",
        "INSERT INTO translation_stable_id VALUES (20, 'ENSP00000369497')",
        "INSERT INTO object_xref VALUES (1, 1, 'Gene', 1)",
        "INSERT INTO external_synonym VALUES (1, 'FANCD1')",
        rows={
            "INSERT INTO xref VALUES (1, 3, :accession, 'BRCA2', :description)": [
                {"accession": "HGNC:1101", "description": "BRCA2 DNA repair associated"},
            ],
        },
    )


@pytest.fixture
def variation_engine():
    """Variation database with three dbSNP variations and one synonym."""
    return make_engine(
        "CREATE TABLE source (source_id INTEGER, name TEXT)",
        "CREATE TABLE variation (variation_id INTEGER, source_id INTEGER, name TEXT)",
        "CREATE TABLE variation_synonym (variation_id INTEGER, name TEXT)",
        "INSERT INTO source VALUES (1, 'dbSNP')",
        "INSERT INTO variation VALUES (1, 1, 'rs699'), (2, 1, 'rs6990'), (3, 1, 'rs1042713')",
        "INSERT INTO variation_synonym VALUES (3, 'ss12345')",
    )
