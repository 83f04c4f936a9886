"""Cheque Relay Package: two-tier cheque verification service.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
    - Two entry points: public_main (verification tier), internal_main (record tier)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
