"""
UniSearch API Package

Subpackages:
- routers: FastAPI route definitions
- services: Search terms, budgeted dispatch, index catalog and result normalization
"""
