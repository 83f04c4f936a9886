"""Services Layer: orchestration between core logic and infrastructure.

Invariants:
    - Services depend on protocols (ChequeGateway, ChequeRecordSource), not
      concrete clients
    - No raw cheque values in logs, only lengths and flags
"""
