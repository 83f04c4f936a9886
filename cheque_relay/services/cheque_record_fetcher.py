"""Cheque Record Fetcher: one parameterized lookup against the record table.

Invariants:
    - The identifier is always a bound parameter; SQL text never contains user input
    - Only validated ChequeIdentifiers are accepted (callers validate first)
    - Returns None for not-found; raises DatabaseError for every driver/query failure
    - A row missing its status, date or amount is a DatabaseError, never a record
    - The pooled connection is released on every exit path (DatabaseSessionManager)
    - Logs carry the identifier length, never the identifier
"""

import logging

from sqlalchemy import Table, select

from cheque_relay.core.domain_types import ChequeIdentifier, ChequeRecord
from cheque_relay.core.errors import DatabaseError
from cheque_relay.db.cheque_table import build_cheque_table
from cheque_relay.infrastructure.database import DatabaseSessionManager

logger = logging.getLogger(__name__)


class ChequeRecordFetcher:
    """Implements ChequeRecordSource over a DatabaseSessionManager."""

    def __init__(self, db_manager: DatabaseSessionManager, table: Table | None = None):
        self._db_manager = db_manager
        self._table = table if table is not None else build_cheque_table()

    async def fetch(self, identifier: ChequeIdentifier) -> ChequeRecord | None:
        t = self._table
        query = (
            select(
                t.c.cheque_number.label("cheque_number"),
                t.c.status.label("status"),
                t.c.payment_issue_date.label("payment_issue_date"),
                t.c.applied_amount.label("applied_amount"),
            )
            .where(t.c.cheque_number == identifier)
            .limit(1)
        )
        async with self._db_manager.session() as db:
            result = await db.execute(query)
            row = result.first()

        if row is None:
            logger.info(
                "Cheque record not found",
                extra={"cheque_number_length": len(identifier)},
            )
            return None

        if row.status is None or row.payment_issue_date is None or row.applied_amount is None:
            logger.error(
                "Cheque record is incomplete",
                extra={"cheque_number_length": len(identifier)},
            )
            raise DatabaseError("Incomplete cheque record", "query")

        return ChequeRecord(
            status=str(row.status),
            cheque_number=str(row.cheque_number),
            payment_issue_date=row.payment_issue_date,
            applied_amount=row.applied_amount,
        )
