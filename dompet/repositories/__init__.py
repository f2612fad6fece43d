from .base import MongoRepository
from .wallets import WalletRepository
from .transactions import TransactionRepository
from .categories import CategoryRepository
from .items import BudgetRepository, PinjamanRepository, WantToBuyRepository

__all__ = [
    'MongoRepository',
    'WalletRepository',
    'TransactionRepository',
    'CategoryRepository',
    'BudgetRepository',
    'PinjamanRepository',
    'WantToBuyRepository',
]
