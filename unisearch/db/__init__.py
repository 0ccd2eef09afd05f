"""
UniSearch Database Package

Modules:
- engine: One SQLAlchemy engine per connection id (core, vega, est, ...)
- deps: FastAPI dependencies

Usage:
    from unisearch.db.engine import get_engine_registry

    engine = get_engine_registry().get_connection("core")
    if engine is not None:
        with engine.connect() as conn:
            ...
"""
