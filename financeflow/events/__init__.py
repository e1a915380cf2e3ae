"""Ledger event channel package."""

from financeflow.events.publisher import EventHandler, EventPublisher, configure_logging

__all__ = ["EventHandler", "EventPublisher", "configure_logging"]
