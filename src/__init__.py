"""User Management API - CRUD service for users and items.

The service exposes REST resources for users (in-memory or PostgreSQL backed)
and items (in-memory), with generated OpenAPI documentation.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and the error mapper
- **Core Layer**: Configuration, logging, tracing and shared utilities
- **Domain Layer**: Record store contract, tagged results and validation
- **Infrastructure Layer**: In-memory and relational store implementations
"""
