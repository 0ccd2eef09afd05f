from fastapi import APIRouter, Depends

from unisearch.core.species import SpeciesDefs
from unisearch.db.deps import get_species

router = APIRouter(tags=["health"])


@router.get("/health")
def health(species: SpeciesDefs = Depends(get_species)):
    return {"status": "ok", "species": species.name}
