"""CSV export of a user's transactions.

One row per transaction, newest first, with wallet and category ids turned
into names and amounts formatted the way the dashboard shows them.
"""
import csv
import io
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from config import DEFAULT_CURRENCY
from dompet.categories.defaults import SYSTEM_TRANSFER_ID
from dompet.categories.resolver import CategoryResolver, default_resolver
from dompet.currency import format_currency
from dompet.dates import parse_date
from dompet.errors import ValidationError


CSV_HEADERS = ("Date", "Type", "Category", "Description", "Amount", "Wallet")
UNKNOWN_WALLET = "Unknown Wallet"


def _bound(value: Any, name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f"Invalid {name} date: {value}")
    return parsed


def filter_by_date(transactions: Iterable[Mapping[str, Any]], start: Any = None,
                   end: Any = None) -> List[Mapping[str, Any]]:
    """Transactions inside [start, end]; either bound may be left open"""
    start_date, end_date = _bound(start, "start"), _bound(end, "end")
    result = []
    for tx in transactions:
        tx_date = parse_date(tx.get("date"))
        if tx_date is None:
            continue
        if start_date and tx_date < start_date:
            continue
        if end_date and tx_date > end_date:
            continue
        result.append(tx)
    return result


def export_filename(today: Optional[date] = None) -> str:
    return f"finance_export_{(today or date.today()).isoformat()}.csv"


def transactions_csv(transactions: Sequence[Mapping[str, Any]], wallets: Iterable[Mapping[str, Any]],
                     resolver: CategoryResolver = default_resolver, currency: str = DEFAULT_CURRENCY,
                     language: str = "en") -> str:
    wallet_names = {w.get("_id"): w.get("name") for w in wallets}
    buffer = io.StringIO()
    # csv quotes values holding commas, quotes or newlines
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for tx in sorted(transactions, key=lambda t: str(t.get("date") or ""), reverse=True):
        tx_type = tx.get("type") or ""
        if tx_type == "transfer":
            category = resolver.display_name(resolver.get(SYSTEM_TRANSFER_ID), language)
        else:
            category = resolver.display_name_for(tx.get("category_id"), language, tx_type)
        writer.writerow([
            tx.get("date") or "",
            tx_type.capitalize(),
            category,
            tx.get("description") or "",
            format_currency(tx.get("amount"), currency),
            wallet_names.get(tx.get("wallet_id")) or UNKNOWN_WALLET,
        ])
    return buffer.getvalue()
