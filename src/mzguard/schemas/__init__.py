"""Pydantic schemas for mzguard."""
