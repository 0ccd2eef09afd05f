"""
Search index catalog.

Each index (Gene, SNP, Sequence, ...) declares the count/fetch query pairs
it runs, the databases they run against, how its rows become
CanonicalResults, and optionally a per-row enrichment step that runs after
fetching. SOURCES is the explicit registry, in the order indexes are run
when searching everything.

Query templates use ``{op}`` for the comparator ("=" or "LIKE") and bind
parameters for every value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from unisearch.api.services.search_dispatch import (
    RawRow,
    SourceQuery,
    scalar_lookup,
)
from unisearch.api.services.search_normalizers import NORMALIZERS, RowNormalizer, normalize
from unisearch.core.exceptions import UnknownSourceError
from unisearch.core.species import SpeciesDefs
from unisearch.db.engine import ConnectionProvider
from unisearch.schemas.search_schema import CanonicalResult

logger = logging.getLogger(__name__)

QueryBuilder = Callable[[SpeciesDefs], list[SourceQuery]]
RowEnricher = Callable[[ConnectionProvider, list[RawRow]], list[RawRow]]


@dataclass(frozen=True)
class SearchSource:
    name: str
    build_queries: QueryBuilder
    normalizer: RowNormalizer
    enrich: Optional[RowEnricher] = None
    aliases: tuple[str, ...] = field(default_factory=tuple)

    def queries(self, species: SpeciesDefs) -> list[SourceQuery]:
        return self.build_queries(species)

    def normalize(self, rows: list[RawRow], species: SpeciesDefs) -> list[CanonicalResult]:
        return normalize(self.name, rows, species, self.normalizer)

    def connections(self, species: SpeciesDefs) -> list[str]:
        seen: list[str] = []
        for query in self.queries(species):
            if query.connection_id not in seen:
                seen.append(query.connection_id)
        return seen


# --- Gene ---

def _gene_queries_for(db: str) -> list[SourceQuery]:
    """Stable id, xref and description queries against one gene database."""

    def q(count_sql: str, fetch_sql: str) -> SourceQuery:
        return SourceQuery(db, "Gene", count_sql, fetch_sql, params={"db": db})

    queries = [
        # Gene, transcript and translation stable ids
        q(
            "SELECT count(*) FROM gene_stable_id WHERE stable_id {op} :key",
            "SELECT gsi.stable_id, g.description, :db, 'Gene', 'gene'"
            " FROM gene_stable_id AS gsi, gene AS g"
            " WHERE gsi.gene_id = g.gene_id AND gsi.stable_id {op} :key",
        ),
        q(
            "SELECT count(*) FROM transcript_stable_id WHERE stable_id {op} :key",
            "SELECT tsi.stable_id, t.description, :db, 'Transcript', 'transcript'"
            " FROM transcript_stable_id AS tsi, transcript AS t"
            " WHERE tsi.transcript_id = t.transcript_id AND tsi.stable_id {op} :key",
        ),
        q(
            "SELECT count(*) FROM translation_stable_id WHERE stable_id {op} :key",
            "SELECT tlsi.stable_id, t.description, :db, 'Transcript', 'peptide'"
            " FROM translation_stable_id AS tlsi, translation AS tl, transcript AS t"
            " WHERE tl.transcript_id = t.transcript_id"
            " AND tlsi.translation_id = tl.translation_id AND tlsi.stable_id {op} :key",
        ),
    ]

    # Xref accession, then display label where the accession did not match
    for object_type, stable_table, object_table, id_column, page_type, page_name in (
        ("Gene", "gene_stable_id", "gene", "gene_id", "Gene", "gene"),
        ("Transcript", "transcript_stable_id", "transcript", "transcript_id", "Transcript", "transcript"),
    ):
        queries.append(q(
            "SELECT count(*) FROM object_xref AS ox, xref AS x"
            f" WHERE ox.ensembl_object_type = '{object_type}'"
            " AND ox.xref_id = x.xref_id AND x.dbprimary_acc {op} :key",
            f"SELECT si.stable_id, concat(x.display_label, ' - ', o.description), :db,"
            f" '{page_type}', '{page_name}'"
            f" FROM {stable_table} AS si, {object_table} AS o, object_xref AS ox, xref AS x"
            f" WHERE si.{id_column} = ox.ensembl_id AND ox.ensembl_object_type = '{object_type}'"
            f" AND si.{id_column} = o.{id_column} AND ox.xref_id = x.xref_id"
            " AND x.dbprimary_acc {op} :key",
        ))
        queries.append(q(
            "SELECT count(DISTINCT ox.ensembl_id) FROM object_xref AS ox, xref AS x"
            f" WHERE ox.ensembl_object_type = '{object_type}' AND ox.xref_id = x.xref_id"
            " AND x.display_label {op} :key AND NOT (x.dbprimary_acc {op} :key)",
            f"SELECT DISTINCT si.stable_id, concat(x.display_label, ' - ', o.description), :db,"
            f" '{page_type}', '{page_name}'"
            f" FROM {stable_table} AS si, {object_table} AS o, object_xref AS ox, xref AS x"
            f" WHERE si.{id_column} = ox.ensembl_id AND ox.ensembl_object_type = '{object_type}'"
            f" AND si.{id_column} = o.{id_column} AND ox.xref_id = x.xref_id"
            " AND x.display_label {op} :key AND NOT (x.dbprimary_acc {op} :key)",
        ))
        if object_type != "Gene":
            continue

        # Gene descriptions (full text) and external synonyms
        queries.append(q(
            "SELECT count(DISTINCT g.gene_id) FROM gene AS g, object_xref AS ox, xref AS x"
            " WHERE g.gene_id = ox.ensembl_id AND ox.ensembl_object_type = 'Gene'"
            " AND ox.xref_id = x.xref_id"
            " AND MATCH (g.description) AGAINST (:fulltext_key IN BOOLEAN MODE)"
            " AND NOT (x.display_label {op} :key) AND NOT (x.dbprimary_acc {op} :key)",
            "SELECT DISTINCT gsi.stable_id, concat(x.display_label, ' - ', g.description), :db,"
            " 'Gene', 'gene'"
            " FROM gene_stable_id AS gsi, gene AS g, object_xref AS ox, xref AS x"
            " WHERE gsi.gene_id = ox.ensembl_id AND ox.ensembl_object_type = 'Gene'"
            " AND gsi.gene_id = g.gene_id AND ox.xref_id = x.xref_id"
            " AND MATCH (g.description) AGAINST (:fulltext_key IN BOOLEAN MODE)"
            " AND NOT (x.display_label {op} :key) AND NOT (x.dbprimary_acc {op} :key)",
        ))
        queries.append(q(
            "SELECT count(DISTINCT g.gene_id)"
            " FROM gene AS g, object_xref AS ox, xref AS x, external_synonym AS es"
            " WHERE g.gene_id = ox.ensembl_id AND ox.ensembl_object_type = 'Gene'"
            " AND ox.xref_id = x.xref_id AND es.xref_id = x.xref_id AND es.synonym {op} :key"
            " AND NOT (MATCH (g.description) AGAINST (:fulltext_key IN BOOLEAN MODE))"
            " AND NOT (x.display_label {op} :key) AND NOT (x.dbprimary_acc {op} :key)",
            "SELECT DISTINCT gsi.stable_id, concat(x.display_label, ' - ', g.description), :db,"
            " 'Gene', 'gene'"
            " FROM gene_stable_id AS gsi, gene AS g, object_xref AS ox, xref AS x,"
            " external_synonym AS es"
            " WHERE gsi.gene_id = ox.ensembl_id AND ox.ensembl_object_type = 'Gene'"
            " AND gsi.gene_id = g.gene_id AND ox.xref_id = x.xref_id"
            " AND es.xref_id = x.xref_id AND es.synonym {op} :key"
            " AND NOT (MATCH (g.description) AGAINST (:fulltext_key IN BOOLEAN MODE))"
            " AND NOT (x.display_label {op} :key) AND NOT (x.dbprimary_acc {op} :key)",
        ))

    # Translations have no description of their own
    queries.append(q(
        "SELECT count(*) FROM object_xref AS ox, xref AS x"
        " WHERE ox.ensembl_object_type = 'Translation'"
        " AND ox.xref_id = x.xref_id AND x.dbprimary_acc {op} :key",
        "SELECT tlsi.stable_id, x.display_label, :db, 'Transcript', 'peptide'"
        " FROM translation_stable_id AS tlsi, object_xref AS ox, xref AS x"
        " WHERE tlsi.translation_id = ox.ensembl_id"
        " AND ox.ensembl_object_type = 'Translation'"
        " AND ox.xref_id = x.xref_id AND x.dbprimary_acc {op} :key",
    ))
    queries.append(q(
        "SELECT count(DISTINCT ox.ensembl_id) FROM object_xref AS ox, xref AS x"
        " WHERE ox.ensembl_object_type = 'Translation' AND ox.xref_id = x.xref_id"
        " AND x.display_label {op} :key AND NOT (x.dbprimary_acc {op} :key)",
        "SELECT DISTINCT tlsi.stable_id, x.display_label, :db, 'Transcript', 'peptide'"
        " FROM translation_stable_id AS tlsi, object_xref AS ox, xref AS x"
        " WHERE tlsi.translation_id = ox.ensembl_id"
        " AND ox.ensembl_object_type = 'Translation' AND ox.xref_id = x.xref_id"
        " AND x.display_label {op} :key AND NOT (x.dbprimary_acc {op} :key)",
    ))
    return queries


def gene_databases(species: SpeciesDefs) -> list[str]:
    databases = ["core"]
    if species.has_database("DATABASE_VEGA"):
        databases.append("vega")
    if species.has_database("DATABASE_OTHERFEATURES"):
        databases.append("est")
    return databases


def gene_queries(species: SpeciesDefs) -> list[SourceQuery]:
    queries = []
    for db in gene_databases(species):
        queries.extend(_gene_queries_for(db))
    return queries


# --- Variation ---

def snp_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "variation", "SNP",
            "SELECT count(*) FROM variation AS v WHERE v.name {op} :key",
            "SELECT s.name AS source, v.name FROM source AS s, variation AS v"
            " WHERE s.source_id = v.source_id AND v.name {op} :key",
        ),
        SourceQuery(
            "variation", "SNP",
            "SELECT count(*) FROM variation AS v, variation_synonym AS vs"
            " WHERE v.variation_id = vs.variation_id AND vs.name {op} :key",
            "SELECT s.name AS source, v.name"
            " FROM source AS s, variation AS v, variation_synonym AS vs"
            " WHERE s.source_id = v.source_id AND v.variation_id = vs.variation_id"
            " AND vs.name {op} :key",
        ),
    ]


# --- Sequence ---

_MISC_NAME_CODES = "('name', 'clone_name', 'embl_acc', 'synonym', 'sanger_project')"


def sequence_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "core", "Sequence",
            "SELECT count(*) FROM seq_region WHERE name {op} :key",
            "SELECT sr.name, cs.name, 1, sr.length, sr.seq_region_id"
            " FROM seq_region AS sr, coord_system AS cs"
            " WHERE cs.coord_system_id = sr.coord_system_id AND sr.name {op} :key",
        ),
        SourceQuery(
            "core", "Sequence",
            "SELECT count(DISTINCT ma.misc_feature_id)"
            " FROM misc_attrib AS ma JOIN attrib_type AS at USING (attrib_type_id)"
            f" WHERE at.code IN {_MISC_NAME_CODES} AND ma.value {{op}} :key",
            "SELECT ma.value, group_concat(DISTINCT ms.name),"
            " mf.seq_region_start, mf.seq_region_end, mf.seq_region_id"
            " FROM misc_set AS ms, misc_feature_misc_set AS mfms, misc_feature AS mf,"
            " misc_attrib AS ma, attrib_type AS at,"
            " (SELECT DISTINCT ma2.misc_feature_id"
            " FROM misc_attrib AS ma2, attrib_type AS at2"
            " WHERE ma2.attrib_type_id = at2.attrib_type_id"
            f" AND at2.code IN {_MISC_NAME_CODES} AND ma2.value {{op}} :key) AS tt"
            " WHERE ma.misc_feature_id = mf.misc_feature_id"
            " AND mfms.misc_feature_id = mf.misc_feature_id"
            " AND mfms.misc_set_id = ms.misc_set_id"
            " AND ma.misc_feature_id = tt.misc_feature_id"
            " AND ma.attrib_type_id = at.attrib_type_id"
            f" AND at.code IN {_MISC_NAME_CODES}"
            " GROUP BY mf.misc_feature_id",
        ),
    ]


SEQ_REGION_NAME_SQL = "SELECT name FROM seq_region WHERE seq_region_id = :seq_region_id"


def resolve_sequence_regions(
    provider: ConnectionProvider,
    rows: list[RawRow],
) -> list[RawRow]:
    """
    Replace the seq_region_id of each row with its region name.

    Row in:  (name, kind, start, end, seq_region_id)
    Row out: (name, kind, start, end, region name)
    """
    names: dict = {}
    enriched = []
    for name, kind, start, end, seq_region_id in (row[:5] for row in rows):
        if seq_region_id not in names:
            found = scalar_lookup(
                provider, "core", SEQ_REGION_NAME_SQL, {"seq_region_id": seq_region_id}
            )
            names[seq_region_id] = found[0] if found else None
        region = names[seq_region_id]
        if region is None:
            logger.debug(f"No seq_region {seq_region_id} for {name}")
            region = name
        enriched.append((name, kind, start, end, region))
    return enriched


# --- Compara / core feature indexes ---

def domain_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "core", "Domain",
            "SELECT count(*) FROM xref AS x, external_db AS e"
            " WHERE e.external_db_id = x.external_db_id AND e.db_name = 'Interpro'"
            f" AND x.{column} {{op}} :key",
            "SELECT x.dbprimary_acc, x.description FROM xref AS x, external_db AS e"
            " WHERE e.db_name = 'Interpro' AND e.external_db_id = x.external_db_id"
            f" AND x.{column} {{op}} :key",
        )
        for column in ("dbprimary_acc", "description")
    ]


def family_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "compara", "Family",
            f"SELECT count(*) FROM family WHERE {column} {{op}} :key",
            f"SELECT stable_id, description FROM family WHERE {column} {{op}} :key",
        )
        for column in ("stable_id", "description")
    ]


def marker_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "core", "Marker",
            "SELECT count(DISTINCT name) FROM marker_synonym WHERE name {op} :key",
            "SELECT DISTINCT name FROM marker_synonym WHERE name {op} :key",
        )
    ]


def qtl_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "core", "QTL",
            "SELECT count(*) FROM qtl_feature AS qf, qtl AS q"
            " WHERE q.qtl_id = qf.qtl_id AND q.trait {op} :key",
            "SELECT q.trait,"
            " concat(sr.name, ':', qf.seq_region_start, '-', qf.seq_region_end),"
            " qf.seq_region_end - qf.seq_region_start"
            " FROM seq_region AS sr, qtl_feature AS qf, qtl AS q"
            " WHERE q.qtl_id = qf.qtl_id AND qf.seq_region_id = sr.seq_region_id"
            " AND q.trait {op} :key",
        ),
        SourceQuery(
            "core", "QTL",
            "SELECT count(*) FROM qtl_feature AS qf, qtl_synonym AS qs, qtl AS q"
            " WHERE qs.qtl_id = q.qtl_id AND q.qtl_id = qf.qtl_id"
            " AND qs.source_primary_id {op} :key",
            "SELECT q.trait,"
            " concat(sr.name, ':', qf.seq_region_start, '-', qf.seq_region_end),"
            " qf.seq_region_end - qf.seq_region_start"
            " FROM seq_region AS sr, qtl_feature AS qf, qtl_synonym AS qs, qtl AS q"
            " WHERE qs.qtl_id = q.qtl_id AND q.qtl_id = qf.qtl_id"
            " AND qf.seq_region_id = sr.seq_region_id AND qs.source_primary_id {op} :key",
        ),
    ]


def probe_queries(species: SpeciesDefs) -> list[SourceQuery]:
    return [
        SourceQuery(
            "funcgen", "OligoProbe",
            "SELECT count(DISTINCT name) FROM probe_set WHERE name {op} :key",
            "SELECT ps.name, group_concat(DISTINCT a.name ORDER BY a.name SEPARATOR ' '),"
            " a.vendor"
            " FROM probe_set AS ps, array AS a, array_chip AS ac, probe AS p"
            " WHERE ps.name {op} :key AND a.array_id = ac.array_id"
            " AND ac.array_chip_id = p.array_chip_id AND p.probe_set_id = ps.probe_set_id"
            " GROUP BY ps.name",
        )
    ]


def alignment_queries(species: SpeciesDefs) -> list[SourceQuery]:
    queries = []
    for db, kind, table in (
        ("core", "Dna", "dna_align_feature"),
        ("core", "Protein", "protein_align_feature"),
        ("vega", "Dna", "dna_align_feature"),
        ("est", "Dna", "dna_align_feature"),
    ):
        queries.append(SourceQuery(
            db, f"{kind} alignment",
            f"SELECT count(DISTINCT analysis_id, hit_name) FROM {table}"
            " WHERE hit_name {op} :key",
            f"SELECT a.logic_name, f.hit_name, '{kind}', :db, count(*)"
            f" FROM {table} AS f, analysis AS a"
            " WHERE a.analysis_id = f.analysis_id AND f.hit_name {op} :key"
            " GROUP BY a.logic_name, f.hit_name",
            params={"db": db},
        ))
    return queries


SOURCES: list[SearchSource] = [
    SearchSource("Gene", gene_queries, NORMALIZERS["Gene"]),
    SearchSource("SNP", snp_queries, NORMALIZERS["SNP"], aliases=("Variant", "Variation")),
    SearchSource(
        "Sequence", sequence_queries, NORMALIZERS["Sequence"],
        enrich=resolve_sequence_regions,
    ),
    SearchSource("Domain", domain_queries, NORMALIZERS["Domain"]),
    SearchSource("Family", family_queries, NORMALIZERS["Family"]),
    SearchSource("Marker", marker_queries, NORMALIZERS["Marker"]),
    SearchSource("QTL", qtl_queries, NORMALIZERS["QTL"]),
    SearchSource("OligoProbe", probe_queries, NORMALIZERS["OligoProbe"], aliases=("Probe",)),
    SearchSource("GenomicAlignment", alignment_queries, NORMALIZERS["GenomicAlignment"]),
]


def _index(sources: list[SearchSource]) -> dict[str, SearchSource]:
    by_name = {}
    for source in sources:
        for key in (source.name, *source.aliases):
            by_name[key.lower()] = source
    return by_name


_BY_NAME = _index(SOURCES)


def get_source(name: str, sources: Optional[list[SearchSource]] = None) -> SearchSource:
    """Look up an index by name or alias, ignoring case."""
    by_name = _BY_NAME if sources is None else _index(sources)
    source = by_name.get((name or "").strip().lower())
    if source is None:
        raise UnknownSourceError(name)
    return source


def enabled_sources(
    species: SpeciesDefs,
    sources: Optional[list[SearchSource]] = None,
) -> list[SearchSource]:
    """
    Indexes enabled for a species, in catalog order.

    An empty ENSEMBL_SEARCH_IDXS enables every index.
    """
    sources = SOURCES if sources is None else sources
    wanted = species.enabled_sources()
    if not wanted:
        return list(sources)

    enabled = [s for s in sources if s.name.lower() in wanted]
    known = {s.name.lower() for s in sources}
    for idx in wanted - known:
        logger.debug(f"Ignoring unknown search index in configuration: {idx}")
    return enabled
