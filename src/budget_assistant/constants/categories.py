"""
Expense category names offered by the client dropdowns.
Free-form categories are still accepted; these are only the suggested values.
"""

DEFAULT_CATEGORY = "其他"

EXPENSE_CATEGORIES = [
    "餐飲",
    "交通",
    "購物",
    "娛樂",
    "居家",
    "醫療",
    "教育",
    "水電瓦斯",
    "通訊",
    "保險",
    "旅遊",
    "訂閱服務",
    DEFAULT_CATEGORY,
]


def normalize_category(value: str | None) -> str:
    """Return the trimmed category, falling back to the default bucket."""

    if value is None:
        return DEFAULT_CATEGORY
    cleaned = value.strip()
    return cleaned or DEFAULT_CATEGORY
