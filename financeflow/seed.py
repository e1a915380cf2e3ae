"""
Built-in Categories

The ledger starts with ten expense and five income categories so a
new user can record an operation before creating anything. Seeding
only happens while the store holds no category at all; once a single
category exists, built-in or custom, nothing is added again.
"""

import structlog

from financeflow.ledger import LedgerEngine
from financeflow.models.events import LedgerEventBuilder
from financeflow.models.finance import Category, OperationType, RecordKind
from financeflow.services.storage import StorageError


logger = structlog.get_logger(__name__)


# (name, icon, color, type)
DEFAULT_CATEGORIES: list[tuple[str, str, str, OperationType]] = [
    ("Food", "🍔", "FF6B6B", OperationType.EXPENSE),
    ("Transport", "🚗", "4ECDC4", OperationType.EXPENSE),
    ("Housing", "🏠", "95E1D3", OperationType.EXPENSE),
    ("Health", "💊", "FFB6B9", OperationType.EXPENSE),
    ("Entertainment", "🎬", "C7CEEA", OperationType.EXPENSE),
    ("Subscriptions", "📱", "B5EAD7", OperationType.EXPENSE),
    ("Shopping", "🛍️", "FFDAC1", OperationType.EXPENSE),
    ("Education", "📚", "E0BBE4", OperationType.EXPENSE),
    ("Utilities", "⚡", "D4F1F4", OperationType.EXPENSE),
    ("Other", "📌", "CCCCCC", OperationType.EXPENSE),
    ("Salary", "💼", "91D1BA", OperationType.INCOME),
    ("Freelance", "💻", "88CCEE", OperationType.INCOME),
    ("Gifts", "🎁", "FFDDC1", OperationType.INCOME),
    ("Dividends", "📈", "B4E7FF", OperationType.INCOME),
    ("Other income", "💰", "FFE5B4", OperationType.INCOME),
]


def default_categories() -> list[Category]:
    """Fresh Category records for the built-in set."""
    return [
        Category(name=name, icon=icon, color=color, category_type=category_type, is_custom=False)
        for name, icon, color, category_type in DEFAULT_CATEGORIES
    ]


def seed_default_categories(engine: LedgerEngine) -> int:
    """
    Insert the built-in categories into an empty store.

    Returns:
        Number of categories inserted (0 when the store already
        had categories or could not be read)
    """
    try:
        existing = engine.store.count_by(RecordKind.CATEGORIES)
    except StorageError as e:
        logger.error("category_count_failed", error=str(e))
        return 0
    if existing > 0:
        return 0

    inserted = 0
    for category in default_categories():
        if engine.add_category(category):
            inserted += 1

    logger.info("default_categories_seeded", count=inserted)
    engine.publisher.publish(LedgerEventBuilder.categories_seeded(inserted))
    return inserted
