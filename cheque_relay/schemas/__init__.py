"""Pydantic Schemas: request/response contracts for both tiers.

Invariants:
    - Schemas accept loosely and never reject with echoed input; semantic
      validation happens in core/ validators
    - Wire names are camelCase aliases, Python names are snake_case

Design Decisions:
    - Separate from domain types: schemas are API contracts, core types are logic
"""
