"""Route Modules: one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix, tags and admission guard
    - Routes never contain business logic (delegate to services/core)

Design Decisions:
    - Explicit registration in public_main / internal_main over auto-discovery
"""
