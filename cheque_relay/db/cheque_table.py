"""Cheque Table: SQLAlchemy Core description of the record store table.

Invariants:
    - Built from InternalSettings: schema, table and column names are configuration
    - Own MetaData per build: nothing is registered globally
"""

from dataclasses import dataclass

from sqlalchemy import Column, Date, MetaData, Numeric, String, Table

from cheque_relay.config import InternalSettings


@dataclass(frozen=True)
class ChequeTableNames:
    table: str = "cheque_verification"
    schema: str | None = None
    cheque_number: str = "cheque_number"
    status: str = "cheque_status"
    payment_issue_date: str = "payment_issue_date"
    applied_amount: str = "applied_amount"

    @classmethod
    def from_settings(cls, settings: InternalSettings) -> "ChequeTableNames":
        return cls(
            table=settings.cheque_table,
            schema=settings.cheque_schema,
            cheque_number=settings.cheque_number_column,
            status=settings.cheque_status_column,
            payment_issue_date=settings.payment_issue_date_column,
            applied_amount=settings.applied_amount_column,
        )


def build_cheque_table(names: ChequeTableNames | None = None) -> Table:
    """Describe the record table; column keys are stable regardless of real names."""
    names = names or ChequeTableNames()
    return Table(
        names.table,
        MetaData(schema=names.schema),
        Column(names.cheque_number, String(16), key="cheque_number", primary_key=True),
        Column(names.status, String(64), key="status"),
        Column(names.payment_issue_date, Date, key="payment_issue_date"),
        Column(names.applied_amount, Numeric(14, 2, asdecimal=True), key="applied_amount"),
    )
