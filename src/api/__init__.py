"""HTTP API layer of the User Management API.

Key components:
- **main**: Application factory and lifecycle management
- **routes**: CRUD routers for users and items, built from one generic factory
- **dependencies**: Resolves the record store registered for a resource
- **middleware**: Correlation IDs, request logging and error mapping
- **schemas**: Pydantic models for records, request rules and error bodies
- **utils**: orjson response class

Route handlers never raise for expected failures. Validation and store
operations return ``Success`` or ``Failure``, and the error mapper in
``middleware.error_handler`` turns a ``Failure`` into the HTTP response.
"""
