"""
PhotoShare Backend — Pydantic Request/Response Schemas
========================================================

What:  The API contract. Database columns are snake_case; every JSON body the
       API accepts or returns is camelCase.
How:   All schemas derive from CamelModel, which generates camelCase aliases.
       FastAPI serializes response_model instances by alias, and
       populate_by_name lets services construct them with snake_case names.

Request bodies are deliberately permissive (mostly Optional fields): missing
or malformed values are reported by the services with the exact messages the
frontend displays ("Title is required", "Rating must be an integer between
1 and 5"), rather than FastAPI's generic validation error.
"""
