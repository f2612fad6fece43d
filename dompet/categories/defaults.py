"""Default category table shared by every user.

Loaded once at import; the records are read-only mappings so the table can be
handed to resolvers and seeders without copies.
"""
from types import MappingProxyType
from typing import Mapping, Tuple


EXPENSE_OTHER_ID = 12
INCOME_OTHER_ID = 17
SYSTEM_TRANSFER_ID = 18

FIRST_CUSTOM_CATEGORY_ID = 100


def _category(category_id, key, en_name, id_name, type_, icon, color) -> Mapping:
    return MappingProxyType({
        "category_id": category_id,
        "category_key": key,
        "en_name": en_name,
        "id_name": id_name,
        "type": type_,
        "icon": icon,
        "color": color,
        "user_id": None,
    })


DEFAULT_CATEGORIES: Tuple[Mapping, ...] = (
    _category(1, "expense_groceries", "Groceries", "Kebutuhan Rumah", "expense", "shopping-basket", "#EF4444"),
    _category(2, "expense_food", "Dining", "Makan di Luar", "expense", "utensils", "#F97316"),
    _category(3, "expense_transportation", "Transportation", "Transportasi", "expense", "car", "#F59E0B"),
    _category(4, "expense_subscription", "Subscription", "Berlangganan", "expense", "repeat", "#3B82F6"),
    _category(5, "expense_housing", "Housing", "Perumahan", "expense", "home", "#8B5CF6"),
    _category(6, "expense_entertainment", "Entertainment", "Hiburan", "expense", "film", "#EC4899"),
    _category(7, "expense_shopping", "Shopping", "Belanja", "expense", "shopping-cart", "#F43F5E"),
    _category(8, "expense_health", "Health", "Kesehatan", "expense", "heart-pulse", "#10B981"),
    _category(9, "expense_education", "Education", "Pendidikan", "expense", "graduation-cap", "#06B6D4"),
    _category(10, "expense_travel", "Travel", "Perjalanan", "expense", "plane", "#6366F1"),
    _category(11, "expense_personal", "Personal Care", "Perawatan Diri", "expense", "user", "#A855F7"),
    _category(12, "expense_other", "Other", "Lainnya", "expense", "more-horizontal", "#6B7280"),
    _category(13, "income_salary", "Salary", "Gaji", "income", "wallet", "#10B981"),
    _category(14, "income_business", "Business", "Bisnis", "income", "briefcase", "#3B82F6"),
    _category(15, "income_investment", "Investment", "Investasi", "income", "trending-up", "#8B5CF6"),
    _category(16, "income_gift", "Gift", "Hadiah", "income", "gift", "#EC4899"),
    _category(17, "income_other", "Other", "Lainnya", "income", "more-horizontal", "#6B7280"),
    _category(18, "system_transfer", "Transfer", "Transfer", "system", "arrow-right-left", "#0EA5E9"),
    _category(19, "expense_donation", "Donation", "Donasi", "expense", "heart", "#F87171"),
    _category(20, "expense_investment", "Investment", "Investasi", "expense", "trending-up", "#34D399"),
    _category(21, "expense_baby", "Baby Needs", "Kebutuhan Bayi", "expense", "baby", "#FBB6CE"),
)

# Keys written by older clients before the numeric scheme settled
LEGACY_ALIASES: Mapping[str, int] = MappingProxyType({
    "expense_transport": 3,
    "expense_bills": 5,
    "expense_vehicle": 10,
    "expense_baby_needs": 21,
    "transfer": SYSTEM_TRANSFER_ID,
})

KEY_TO_ID: Mapping[str, int] = MappingProxyType({
    **{c["category_key"]: c["category_id"] for c in DEFAULT_CATEGORIES},
    **LEGACY_ALIASES,
})

DEFAULT_IDS = frozenset(c["category_id"] for c in DEFAULT_CATEGORIES)

FALLBACK_BY_TYPE: Mapping[str, int] = MappingProxyType({
    "expense": EXPENSE_OTHER_ID,
    "income": INCOME_OTHER_ID,
    "transfer": SYSTEM_TRANSFER_ID,
    "system": SYSTEM_TRANSFER_ID,
})

UNKNOWN_NAME: Mapping[str, str] = MappingProxyType({"en": "Other", "id": "Lainnya"})
