from __future__ import annotations

from unisearch.core.species import SpeciesDefs, get_species_defs
from unisearch.db.engine import EngineRegistry, get_engine_registry


def get_connections() -> EngineRegistry:
    return get_engine_registry()


def get_species() -> SpeciesDefs:
    return get_species_defs()
