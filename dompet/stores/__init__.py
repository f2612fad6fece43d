from .base import EntityStore
from .notifications import Notification, Notifier
from .optimistic import CompensatingBatch, MutationGuard, MutationState, OptimisticCommand
from .wallets import WalletStore
from .transactions import TransactionStore
from .categories import CategoryStore
from .budgets import BudgetStore
from .want_to_buy import WantToBuyStore
from .pinjaman import PinjamanStore

__all__ = [
    'EntityStore',
    'Notification',
    'Notifier',
    'CompensatingBatch',
    'MutationGuard',
    'MutationState',
    'OptimisticCommand',
    'WalletStore',
    'TransactionStore',
    'CategoryStore',
    'BudgetStore',
    'WantToBuyStore',
    'PinjamanStore',
]
