"""Query execution package."""

from financeflow.queries.executor import OperationQueryExecutor, QueryExecutionError

__all__ = ["OperationQueryExecutor", "QueryExecutionError"]
