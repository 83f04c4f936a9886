"""Database Layer: read-only description of the externally-owned cheque table.

Invariants:
    - This package owns no schema: no migrations, no create_all in production
    - Table and column names come from configuration only, never from requests

Design Decisions:
    - asyncpg driver for PostgreSQL by default; any SQLAlchemy async dialect
      works through InternalSettings.database_url
"""
