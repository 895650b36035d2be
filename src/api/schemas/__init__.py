"""Pydantic models for request rulesets, stored records and error bodies."""
