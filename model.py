from __future__ import annotations

from typing import Any, Dict, List


# MongoDB logical model templates
# Every document is owned by exactly one user through user_id;
# categories with user_id None are the shared defaults.


db: Dict[str, Dict[str, Any]] = {
    "wallets": {
        "user_id": "",
        "name": "",
        "balance": 0.0,
        "opening_balance": 0.0,
        "type": "cash",  # cash | bank | e-wallet | investment
        "color": "",
        "icon": "",
        "version": 0,  # bumped on every balance write (compare-and-swap)
        "created_at": 0,
        "updated_at": 0,
    },

    "transactions": {
        "user_id": "",
        "amount": 0.0,
        "type": "expense",  # income | expense | transfer
        "category_id": None,  # numeric categories.category_id
        "description": "",
        "date": "",  # YYYY-MM-DD
        "wallet_id": "",
        "destination_wallet_id": None,  # transfers only
        "fee": None,  # transfers only, debited from wallet_id
        "created_at": 0,
        "updated_at": 0,
    },

    "budgets": {
        "user_id": "",
        "category_id": None,
        "amount": 0.0,
        "period": "monthly",  # weekly | monthly | yearly
        "created_at": 0,
        "updated_at": 0,
    },

    "categories": {
        "category_id": 0,
        "category_key": None,  # legacy string key, defaults only
        "en_name": "",
        "id_name": "",
        "type": "expense",  # income | expense | system
        "icon": None,
        "color": None,
        "user_id": None,  # None = default/shared
    },

    "want_to_buy_items": {
        "user_id": "",
        "name": "",
        "price": 0.0,
        "category": "Keinginan",  # Keinginan (want) | Kebutuhan (need)
        "priority": "Sedang",  # Tinggi | Sedang | Rendah
        "estimated_date": "",
        "icon": None,
        "is_purchased": False,
        "purchase_date": None,
        "created_at": 0,
    },

    "pinjaman_items": {
        "user_id": "",
        "name": "",
        "amount": 0.0,
        "category": "debt",  # debt (Utang) | credit (Piutang)
        "due_date": "",
        "icon": None,
        "description": "",
        "lender_name": "",
        "is_settled": False,
        "created_at": 0,
    },

    "counters": {
        "_id": "",  # sequence name, e.g. "category_id"
        "seq": 0,
    },
}


# Suggested indexes (to be applied via config.ensure_indexes)
index_specs: Dict[str, List] = {
    "wallets": [(("user_id", 1), {"name": "idx_wallet_user"})],
    "transactions": [
        (("user_id", 1), {"name": "idx_tx_user"}),
        (("date", -1), {"name": "idx_tx_date"}),
        (("wallet_id", 1), {"name": "idx_tx_wallet"}),
        (("destination_wallet_id", 1), {"name": "idx_tx_dest_wallet"}),
        (("category_id", 1), {"name": "idx_tx_category"}),
    ],
    "budgets": [
        (("user_id", 1), {"name": "idx_budget_user"}),
        (("category_id", 1), {"name": "idx_budget_category"}),
    ],
    "categories": [
        (("category_id", 1), {"name": "idx_cat_id", "unique": True}),
        (("user_id", 1), {"name": "idx_cat_user"}),
    ],
    "want_to_buy_items": [(("user_id", 1), {"name": "idx_wtb_user"})],
    "pinjaman_items": [
        (("user_id", 1), {"name": "idx_pinjaman_user"}),
        (("due_date", 1), {"name": "idx_pinjaman_due"}),
    ],
}
