"""
Schemas module - request schemas and status enums for API endpoints.

Documents in the store stay plain dicts; these models are the API contract
for what clients send.
"""
