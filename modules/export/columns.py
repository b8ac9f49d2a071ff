"""
modules/export/columns.py

Column schemas supplied to the export engine.

INVENTORY_COLUMNS is the fixed 12-column inventory schema. Quantities
default to "0" and timestamps render as short US dates (M/D/YYYY).
NAMED_FORMATTERS lets JSON callers (the HTTP API) refer to these
formatters by name, since functions cannot travel over the wire.
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List

from models.schemas import ColumnConfig


def format_quantity(value: Any) -> str:
    return "0" if value is None or value == "" else str(value)


def format_short_date(value: Any) -> str:
    """ISO string / date / datetime → "10/19/2026". Empty input → ""."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return str(value)
    return f"{moment.month}/{moment.day}/{moment.year}"


NAMED_FORMATTERS = {
    "quantity": format_quantity,
    "date":     format_short_date,
}


INVENTORY_COLUMNS: List[ColumnConfig] = [
    ColumnConfig("code",                "Code",            15),
    ColumnConfig("generic_name",        "Generic Name",    25),
    ColumnConfig("brand_name",          "Brand Name",      25),
    ColumnConfig("category",            "Category",        20),
    ColumnConfig("stock_quantity",      "Stock Quantity",  15, format_quantity),
    ColumnConfig("stock_threshold",     "Stock Threshold", 15, format_quantity),
    ColumnConfig("unit_of_measurement", "Unit",            12),
    ColumnConfig("expiration_date",     "Expiration Date", 20),
    ColumnConfig("status",              "Status",          15),
    ColumnConfig("notes",               "Notes",           30),
    ColumnConfig("created_at",          "Created Date",    20, format_short_date),
    ColumnConfig("updated_at",          "Updated Date",    20, format_short_date),
]

_INVENTORY_BY_KEY: Dict[str, ColumnConfig] = {c.key: c for c in INVENTORY_COLUMNS}


def select_inventory_columns(keys: Iterable[str]) -> List[ColumnConfig]:
    """
    Pick inventory columns by key, keeping schema order.
    Raises KeyError for keys the schema does not define.
    """
    wanted = set(keys)
    unknown = wanted - _INVENTORY_BY_KEY.keys()
    if unknown:
        raise KeyError(f"Unknown inventory column(s): {', '.join(sorted(unknown))}")
    return [c for c in INVENTORY_COLUMNS if c.key in wanted]
