from typing import Any, Dict, Iterable, List, Mapping, Optional

from dompet.categories import defaults


LEGACY_KEY_SEPARATOR = "_"


class CategoryResolver:
    """Translate legacy string keys, numeric ids and bilingual names.

    Resolution never raises: malformed or unknown input degrades to the
    "other" category of the matching transaction type. Custom categories are
    only reachable through their numeric id.
    """

    def __init__(self, table: Iterable[Mapping] = defaults.DEFAULT_CATEGORIES,
                 categories: Iterable[Mapping] = (),
                 key_to_id: Mapping[str, int] = defaults.KEY_TO_ID):
        self.table = tuple(table)
        self.key_to_id = key_to_id
        self._by_id: Dict[int, Mapping] = {}
        for category in self.table:
            self._by_id[int(category["category_id"])] = category
        self.set_custom_categories(categories)

    def set_custom_categories(self, categories: Iterable[Mapping]) -> None:
        """Replace the known custom categories (defaults are kept)"""
        self._by_id = {cid: cat for cid, cat in self._by_id.items() if cat.get("user_id") is None}
        for category in categories:
            try:
                self._by_id[int(category["category_id"])] = category
            except (KeyError, TypeError, ValueError):
                print(f"⚠️ [CATEGORY] Skipping malformed category record: {category!r}")

    def fallback_id(self, transaction_type: Optional[str] = None) -> int:
        return defaults.FALLBACK_BY_TYPE.get(transaction_type or "expense", defaults.EXPENSE_OTHER_ID)

    def resolve(self, raw: Any, transaction_type: Optional[str] = None) -> int:
        if raw is None or isinstance(raw, bool):
            return self.fallback_id(transaction_type)

        numeric = self._as_int(raw)
        if numeric is not None:
            if numeric in self._by_id:
                return numeric
            return self.fallback_id(transaction_type)

        if not isinstance(raw, str) or not raw.strip():
            return self.fallback_id(transaction_type)

        text = raw.strip()
        if LEGACY_KEY_SEPARATOR in text:
            category_id = self.key_to_id.get(text.lower())
            if category_id is not None:
                return category_id
            return self.fallback_id(transaction_type or self._type_from_key(text))

        by_name = self._match_name(text)
        if by_name is not None:
            return by_name
        return self.fallback_id(transaction_type)

    def normalize(self, raw: Any, transaction_type: Optional[str] = None) -> int:
        """Like resolve, but numeric ids pass through even when not loaded here"""
        numeric = self._as_int(raw)
        if numeric is not None:
            return numeric
        return self.resolve(raw, transaction_type)

    def get(self, category_id: Any) -> Optional[Mapping]:
        numeric = self._as_int(category_id)
        if numeric is None:
            return None
        return self._by_id.get(numeric)

    def by_type(self, category_type: str) -> List[Mapping]:
        return sorted(
            (c for c in self._by_id.values() if c.get("type") == category_type),
            key=lambda c: int(c["category_id"]),
        )

    def all(self) -> List[Mapping]:
        return [self._by_id[cid] for cid in sorted(self._by_id)]

    def display_name(self, category: Optional[Mapping], language: str = "id") -> str:
        if not category:
            return defaults.UNKNOWN_NAME.get(language, defaults.UNKNOWN_NAME["en"])
        if language == "id":
            return category.get("id_name") or category.get("en_name") or defaults.UNKNOWN_NAME["id"]
        return category.get("en_name") or category.get("id_name") or defaults.UNKNOWN_NAME["en"]

    def display_name_for(self, raw: Any, language: str = "id", transaction_type: Optional[str] = None) -> str:
        return self.display_name(self.get(self.resolve(raw, transaction_type)), language)

    @staticmethod
    def _as_int(raw: Any) -> Optional[int]:
        if isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float):
            return int(raw) if raw.is_integer() else None
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw.strip())
        return None

    @staticmethod
    def _type_from_key(key: str) -> str:
        prefix = key.split(LEGACY_KEY_SEPARATOR, 1)[0].lower()
        return prefix if prefix in ("income", "expense", "system") else "expense"

    def _match_name(self, name: str) -> Optional[int]:
        lowered = name.lower()
        for category in self.table:
            if lowered in (str(category.get("en_name", "")).lower(), str(category.get("id_name", "")).lower()):
                return int(category["category_id"])
        return None


default_resolver = CategoryResolver()
