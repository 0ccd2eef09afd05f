"""Pydantic schemas for UniSearch responses."""
