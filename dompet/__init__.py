"""Personal finance ledger: wallets, transactions, budgets, loans and wishlist."""

__version__ = "0.3.0"
