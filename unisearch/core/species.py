"""
Species configuration used by the search indexes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from unisearch.core.settings import Settings, settings as default_settings


@dataclass(frozen=True)
class SpeciesDefs:
    """Per-species search configuration.

    ``search_idxs`` mirrors ENSEMBL_SEARCH_IDXS: the indexes enabled for the
    species, or empty to enable every registered index. ``databases`` lists
    the optional databases the species ships with (DATABASE_VEGA, ...).
    """

    name: str
    species_path: str
    search_idxs: tuple[str, ...] = ()
    databases: frozenset[str] = field(default_factory=frozenset)
    no_sequence: bool = False

    def has_database(self, key: str) -> bool:
        return key.upper() in self.databases

    def enabled_sources(self) -> set[str]:
        return {idx.lower() for idx in self.search_idxs}

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "SpeciesDefs":
        config = config or default_settings
        return cls(
            name=config.species_name,
            species_path=config.species_path.rstrip("/"),
            search_idxs=tuple(config.search_idxs),
            databases=frozenset(db.upper() for db in config.species_databases),
            no_sequence=config.no_sequence,
        )


def get_species_defs() -> SpeciesDefs:
    """Species configuration for the running site."""
    return SpeciesDefs.from_settings()
