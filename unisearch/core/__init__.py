"""
UniSearch Core Package

Modules:
- settings: Application settings (pydantic-settings, .env aware)
- species: Species configuration used by the indexes
- exceptions: Search error types
"""
