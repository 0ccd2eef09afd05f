from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Expected:
      - UNISEARCH_DATABASES: JSON map of connection id to SQLAlchemy URL,
        e.g. {"core": "mysql+pymysql://anonymous@localhost/homo_sapiens_core_58_37c"}
        Databases left out are searched as if they had no matches.

    Optional:
      - SPECIES_NAME / SPECIES_PATH: used for URL construction
      - ENSEMBL_SEARCH_IDXS: JSON list of enabled search indexes (empty = all)
      - SPECIES_DATABASES: JSON list of optional databases the species has
        (e.g. ["DATABASE_VEGA", "DATABASE_OTHERFEATURES"])
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    databases: dict[str, str] = Field(
        default_factory=dict,
        validation_alias="UNISEARCH_DATABASES",
    )

    # Species configuration
    species_name: str = Field(default="Homo_sapiens", validation_alias="SPECIES_NAME")
    species_path: str = Field(default="/Homo_sapiens", validation_alias="SPECIES_PATH")
    search_idxs: list[str] = Field(
        default_factory=list,
        validation_alias="ENSEMBL_SEARCH_IDXS",
    )
    species_databases: list[str] = Field(
        default_factory=list,
        validation_alias="SPECIES_DATABASES",
    )
    no_sequence: bool = Field(default=False, validation_alias="NO_SEQUENCE")

    # Result budgets
    search_budget_single: int = Field(
        default=30,
        description="Rows returned when a single index is searched",
    )
    search_budget_all: int = Field(
        default=10,
        description="Rows returned per index when searching all indexes",
    )

    # Execution
    search_max_workers: int = Field(
        default=1,
        description="Worker threads used to run indexes in parallel (1 = sequential)",
    )
    search_source_timeout: Optional[float] = Field(
        default=60.0,
        description="Seconds an index may take before it is reported empty",
    )
    query_timeout: int = Field(
        default=30,
        description="MySQL read/write timeout in seconds for a single query",
    )

    # API prefix (kept constant for reverse-proxy routing)
    api_prefix: str = "/api"

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
        ],
    )


settings = Settings()
