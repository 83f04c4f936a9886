"""Infrastructure Layer: external clients and cross-cutting concerns.

Invariants:
    - Every external call (HTTP, database) maps its failures to ChequeRelayError
      subclasses or tagged gateway results; raw driver errors never escape
    - Process-local state (admission counters, pools) is owned by the app

Design Decisions:
    - Thin wrappers over httpx, SQLAlchemy and PyJWT instead of bespoke clients
"""
