"""
Application Wiring for FinanceFlow

This module builds the object graph the presentation layer works
with: record store, event publisher, validator, ledger engine and
query executor.

DESIGN DECISION: There is no global engine. The factory builds one
set of components and the caller owns it. The Streamlit app keeps
its set in st.cache_resource; tests build their own around an
in-memory store.
"""

from typing import Optional

import structlog

from financeflow.config import Settings, StorageSettings, get_settings
from financeflow.events import EventPublisher, configure_logging
from financeflow.ledger import LedgerEngine
from financeflow.queries import OperationQueryExecutor
from financeflow.seed import seed_default_categories
from financeflow.services.storage import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
)
from financeflow.validation import LedgerValidator


logger = structlog.get_logger(__name__)


def create_store(storage_settings: StorageSettings) -> RecordStore:
    """Build the record store named by the storage settings."""
    if storage_settings.backend == "memory":
        return InMemoryRecordStore()
    return JsonFileRecordStore(storage_settings.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
) -> tuple[LedgerEngine, OperationQueryExecutor]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to get_settings()
        store: Record store to use; defaults to the configured backend.
               Pass an InMemoryRecordStore for testing.

    Returns:
        (engine, query_executor) with the working set loaded and,
        when enabled, the built-in categories seeded

    Raises:
        StorageError: If the configured store cannot be opened
    """
    settings = settings or get_settings()
    app_settings = settings.app
    ledger_settings = settings.ledger

    configure_logging(app_settings.log_level)

    if store is None:
        store = create_store(settings.storage)

    publisher = EventPublisher()
    engine = LedgerEngine(
        store=store,
        publisher=publisher,
        validator=LedgerValidator(ledger_settings),
        settings=ledger_settings,
    )
    engine.load()

    if ledger_settings.seed_default_categories:
        seed_default_categories(engine)

    logger.info(
        "app_components_created",
        store=type(store).__name__,
        environment=app_settings.app_environment,
    )
    return engine, OperationQueryExecutor(engine)
