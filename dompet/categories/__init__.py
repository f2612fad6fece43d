from .defaults import (
    DEFAULT_CATEGORIES,
    EXPENSE_OTHER_ID,
    INCOME_OTHER_ID,
    SYSTEM_TRANSFER_ID,
)
from .resolver import CategoryResolver, default_resolver

__all__ = [
    'DEFAULT_CATEGORIES',
    'EXPENSE_OTHER_ID',
    'INCOME_OTHER_ID',
    'SYSTEM_TRANSFER_ID',
    'CategoryResolver',
    'default_resolver',
]
