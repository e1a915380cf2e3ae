"""
Operation Query Execution

DESIGN DECISION: Queries run over the engine's working set, never
against the store directly. The operations list, the dashboard and
the analytics page therefore always agree on what exists.

A query never raises. A failure comes back as a result with
success=False and the error message, so a broken filter shows an
empty list with an explanation instead of crashing the page.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from financeflow.ledger import LedgerEngine
from financeflow.ledger.dates import clamp_day_to_month
from financeflow.models.finance import Operation
from financeflow.models.views import (
    OperationFilter,
    OperationQueryResult,
    OperationRow,
)


logger = structlog.get_logger(__name__)


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


class OperationQueryExecutor:
    """
    Filters and resolves operations for display.

    GUARANTEES:
    - Only returns operations from the working set
    - Keeps the newest-first order of the store
    - Unresolved categories and accounts show as "Unknown"
    """

    def __init__(self, engine: LedgerEngine):
        self._engine = engine

    def execute(self, query: OperationFilter) -> OperationQueryResult:
        """Run a filter against the current working set."""
        try:
            return self._execute(query)
        except Exception as e:
            logger.error("operation_query_failed", error=str(e))
            return OperationQueryResult(
                success=False,
                error_message=str(e),
                result_count=0,
                query_description=f"Query failed: {str(e)}",
            )

    def _execute(self, query: OperationFilter) -> OperationQueryResult:
        if query.date_from and query.date_to and query.date_from > query.date_to:
            raise QueryExecutionError(
                f"Start date {query.date_from} is after end date {query.date_to}"
            )

        matches = [op for op in self._engine.operations if self._matches(op, query)]
        if query.limit is not None:
            matches = matches[:query.limit]

        rows = [
            OperationRow(
                operation=op,
                category_name=self._engine.category_name(op.category_id),
                account_name=self._engine.account_name(op.account_id),
            )
            for op in matches
        ]

        return OperationQueryResult(
            success=True,
            result_count=len(rows),
            rows=rows,
            total_amount=sum((op.amount for op in matches), Decimal("0")),
            query_description=self._describe(query),
        )

    @staticmethod
    def _matches(op: Operation, query: OperationFilter) -> bool:
        if query.operation_type and op.operation_type != query.operation_type:
            return False
        if query.category_id and op.category_id != query.category_id:
            return False
        if query.account_id and op.account_id != query.account_id:
            return False
        if query.date_from and op.date.date() < query.date_from:
            return False
        if query.date_to and op.date.date() > query.date_to:
            return False
        search = query.search_text.strip().lower()
        if search and search not in op.description.lower():
            return False
        return True

    def _describe(self, query: OperationFilter) -> str:
        """Build a short human-readable description of the filter."""
        desc_parts = ["Listing operations"]
        if query.operation_type:
            desc_parts.append(f"type: {query.operation_type.display_name.lower()}")
        if query.category_id:
            desc_parts.append(f"category: {self._engine.category_name(query.category_id)}")
        if query.account_id:
            desc_parts.append(f"account: {self._engine.account_name(query.account_id)}")
        if query.search_text.strip():
            desc_parts.append(f"matching '{query.search_text.strip()}'")
        if query.date_from or query.date_to:
            desc_parts.append(self._date_range_str(query.date_from, query.date_to))
        return " | ".join(desc_parts)

    def _date_range_str(
        self,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> str:
        """Format date range for description."""
        if date_from and date_to:
            if date_from == date_to:
                return f"on {date_from.strftime('%d %b %Y')}"
            elif (
                date_from.day == 1
                and (date_from.year, date_from.month) == (date_to.year, date_to.month)
                and date_to.day == clamp_day_to_month(date_to.year, date_to.month, 31)
            ):
                return f"in {date_from.strftime('%B %Y')}"
            return f"from {date_from.strftime('%d %b %Y')} to {date_to.strftime('%d %b %Y')}"
        elif date_from:
            return f"from {date_from.strftime('%d %b %Y')}"
        elif date_to:
            return f"until {date_to.strftime('%d %b %Y')}"
        return ""
