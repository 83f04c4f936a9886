"""API Layer: FastAPI routes, dependencies and error handlers for both tiers.

Invariants:
    - Routes registered explicitly in the app factories (no auto-discovery)
    - All endpoints return structured JSON responses, failures as {success: false, error}

Design Decisions:
    - Thin routes delegate to services and core validators
"""
