"""
Row to CanonicalResult conversion for each search index.

Every index returns rows of its own shape; the functions here map them to
CanonicalResult with a link into the species site. They are pure and keep
the order of the rows they are given.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional

from unisearch.core.species import SpeciesDefs
from unisearch.schemas.search_schema import CanonicalResult, ExtraUrl

RowNormalizer = Callable[[tuple, SpeciesDefs], CanonicalResult]


def _text(value) -> str:
    return "" if value is None else str(value)


def _ucfirst(value) -> str:
    value = _text(value)
    return value[:1].upper() + value[1:]


def gene_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    """
    Row: (stable_id, description, db, page type, page name)

    Page type is "Gene" or "Transcript"; page name is "gene", "transcript"
    or "peptide" and its first letter is the URL parameter.
    """
    stable_id, description, db, page_type, page_name = row[:5]
    path = species.species_path
    short = _text(page_name)[:1]
    summary = "ProteinSummary" if short == "p" else "Summary"
    location = "cytoview" if species.no_sequence else "Location"

    return CanonicalResult(
        index="Gene",
        subtype=_ucfirst(page_name),
        id=_text(stable_id),
        url=f"{path}/{page_type}/{summary}?{short}={stable_id};db={db}",
        extra_url=ExtraUrl(
            label="Region in detail",
            title="View marker in LocationView",
            url=f"{path}/{location}/View?{page_name}={stable_id};db={db}",
        ),
        description=_text(description),
        species=species.name,
    )


def snp_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    """Row: (source, variation name)"""
    source, name = row[:2]
    return CanonicalResult(
        index="SNP",
        subtype=f"{source} SNP",
        id=_text(name),
        url=f"{species.species_path}/Variation/Summary?source={source};v={name}",
        species=species.name,
    )


def sequence_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    """Row: (name, coord system or misc sets, start, end, region name)"""
    name, kind, start, end, region = row[:5]
    path = species.species_path
    location = f"{region}:{start}-{end}"
    return CanonicalResult(
        index="Sequence",
        subtype=_ucfirst(kind),
        id=_text(name),
        url=f"{path}/Location/View?r={location}",
        extra_url=ExtraUrl(
            label="Region overview",
            title="View region overview",
            url=f"{path}/Location/Overview?r={location}",
        ),
        species=species.name,
    )


def domain_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    accession, description = row[:2]
    return CanonicalResult(
        index="Domain",
        subtype="Domain",
        id=_text(accession),
        url=f"{species.species_path}/Location/Genome?ftype=Domain;id={accession}",
        description=_text(description),
        species=species.name,
    )


def family_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    stable_id, description = row[:2]
    return CanonicalResult(
        index="Family",
        subtype="Family",
        id=_text(stable_id),
        url=f"{species.species_path}/Gene/Family/Genes?family={stable_id}",
        description=_text(description),
        species=species.name,
    )


def marker_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    name = row[0]
    return CanonicalResult(
        index="Marker",
        subtype="Marker",
        id=_text(name),
        url=f"{species.species_path}/Location/Marker?m={name}",
        species=species.name,
    )


def qtl_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    """Row: (trait, "chr:start-end", length)"""
    trait, region = row[:2]
    return CanonicalResult(
        index="QTL",
        subtype="QTL",
        id=_text(trait),
        url=f"{species.species_path}/Location/View?r={region}",
        species=species.name,
    )


def probe_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    """Row: (probe set name, space separated array names, vendor)"""
    name, arrays, vendor = row[:3]
    return CanonicalResult(
        index="OligoProbe",
        subtype=f"{vendor} Probe set",
        id=_text(name),
        url=(
            f"{species.species_path}/Location/Genome"
            f"?ftype=ProbeFeature;fdb=funcgen;ptype=pset;id={name}"
        ),
        description=f"Is a member of the following arrays: {_text(arrays)}",
        species=species.name,
    )


def alignment_result(row: tuple, species: SpeciesDefs) -> CanonicalResult:
    """Row: (analysis logic name, hit name, "Dna" or "Protein", db, hit count)"""
    logic_name, hit_name, kind, db, hits = row[:5]
    return CanonicalResult(
        index="GenomicAlignment",
        subtype=f"{logic_name} {kind} alignment feature",
        id=_text(hit_name),
        url=(
            f"{species.species_path}/Location/Genome"
            f"?ftype={kind}AlignFeature;db={db};id={hit_name}"
        ),
        description=f"This {kind} alignment feature hits the genome in {hits} place(s).",
        species=species.name,
    )


NORMALIZERS: dict[str, RowNormalizer] = {
    "Gene": gene_result,
    "SNP": snp_result,
    "Sequence": sequence_result,
    "Domain": domain_result,
    "Family": family_result,
    "Marker": marker_result,
    "QTL": qtl_result,
    "OligoProbe": probe_result,
    "GenomicAlignment": alignment_result,
}


def normalize(
    source_name: str,
    rows: Iterable[tuple],
    species: SpeciesDefs,
    to_result: Optional[RowNormalizer] = None,
) -> list[CanonicalResult]:
    """
    Convert raw rows of one index into canonical results.

    ``to_result`` overrides the row normalizer registered for the index.
    """
    to_result = to_result or NORMALIZERS[source_name]
    return [to_result(row, species) for row in rows]
