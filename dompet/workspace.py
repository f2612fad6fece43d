from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from dompet.categories.resolver import CategoryResolver
from dompet.export import export_filename, filter_by_date, transactions_csv
from dompet.stores import (
    BudgetStore,
    CategoryStore,
    MutationGuard,
    Notifier,
    PinjamanStore,
    TransactionStore,
    WalletStore,
    WantToBuyStore,
)


class FinanceWorkspace:
    """Everything one user works with: the stores, their resolver and notifier.

    All stores share one notifier and one mutation guard, so a wallet held
    by a ledger write cannot be deleted at the same time.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.notifier = Notifier()
        self.guard = MutationGuard()
        self.resolver = CategoryResolver()

        shared = {"notifier": self.notifier, "guard": self.guard}
        self.categories = CategoryStore(user_id, self.resolver, **shared)
        self.wallets = WalletStore(user_id, **shared)
        self.transactions = TransactionStore(user_id, self.wallets, resolver=self.resolver, **shared)
        self.budgets = BudgetStore(user_id, resolver=self.resolver, **shared)
        self.want_to_buy = WantToBuyStore(user_id, **shared)
        self.pinjaman = PinjamanStore(user_id, **shared)

        self.wallets.on_deleted = self.transactions.forget_wallet

    def load(self) -> "FinanceWorkspace":
        # categories first: the other stores resolve through them
        self.categories.load()
        self.wallets.load()
        self.transactions.load()
        self.budgets.load()
        self.want_to_buy.load()
        self.pinjaman.load()
        print(f"✅ [WORKSPACE] Loaded {len(self.wallets.items)} wallets and "
              f"{len(self.transactions.items)} transactions for {self.user_id}")
        return self

    def summary(self, now: Optional[Any] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        income = self.transactions.monthly_income(now)
        expense = self.transactions.monthly_expense(now)
        return {
            "total_balance": self.wallets.total_balance(),
            "monthly_income": income,
            "monthly_expense": expense,
            "monthly_net": income - expense,
            "budgets": self.budgets.summary(self.transactions.items, now),
            "total_debt": self.pinjaman.total_debt(),
            "total_credit": self.pinjaman.total_credit(),
            "net_position": self.pinjaman.net_position(),
        }

    def export_transactions(self, start: Any = None, end: Any = None,
                            currency: Optional[str] = None) -> Tuple[str, str]:
        """Filename and CSV body for the transactions between start and end"""
        rows = filter_by_date(self.transactions.items, start, end)
        kwargs = {"currency": currency} if currency else {}
        content = transactions_csv(rows, self.wallets.items, self.resolver, **kwargs)
        print(f"📤 [WORKSPACE] Exported {len(rows)} transactions for {self.user_id}")
        return export_filename(), content
