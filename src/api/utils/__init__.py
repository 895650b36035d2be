"""Helpers shared by the API layer.

- **responses**: JSON response class serializing with orjson
"""
