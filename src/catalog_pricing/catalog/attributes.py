"""
Attribute value normalization for product updates.

Submitted form values are normalized per attribute type before they are
stored. Each type tag maps to a pure transform; types without a transform
pass through unchanged.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Attribute:
    code: str
    type: str


# (value, present) -> value. `present` tells whether the key was submitted at all.
Transform = Callable[[Any, bool], Any]


# Form values that count as unchecked
FALSE_VALUES = (None, "", "0", 0, False)


def _boolean(value: Any, present: bool) -> bool:
    if not present or value in FALSE_VALUES:
        return False
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def _joined(value: Any, present: bool) -> Optional[str]:
    if not present or value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return str(value)


def _price(value: Any, present: bool) -> Any:
    return value if value not in (None, "", 0, "0") else None


def _date(value: Any, present: bool) -> Any:
    return None if value == "" else value


ATTRIBUTE_TRANSFORMS: dict[str, Transform] = {
    "boolean": _boolean,
    "multiselect": _joined,
    "checkbox": _joined,
    "price": _price,
    "date": _date,
}

# Transforms that only run on single-product edits, not on mass updates
SKIPPED_ON_MASS_UPDATE = frozenset({"boolean", "date"})

# Transforms that also run when the attribute was not submitted
APPLIED_WHEN_MISSING = frozenset({"boolean", "multiselect", "checkbox"})


def normalize_attribute_values(data: dict, attributes: list[Attribute], mass_update: bool = False) -> dict:
    """
    Return a copy of `data` with each attribute's value normalized for its type.

    Booleans default to False and multi-value fields to None when absent;
    empty prices and empty dates become None.
    """
    normalized = dict(data)

    for attribute in attributes:
        transform = ATTRIBUTE_TRANSFORMS.get(attribute.type)
        if transform is None:
            continue

        if mass_update and attribute.type in SKIPPED_ON_MASS_UPDATE:
            continue

        present = attribute.code in normalized and normalized[attribute.code] is not None
        if not present and attribute.type not in APPLIED_WHEN_MISSING:
            continue

        normalized[attribute.code] = transform(normalized.get(attribute.code), present)

    return normalized


# Editable product attributes known to the catalog store
PRODUCT_ATTRIBUTES = [
    Attribute(code="sku", type="text"),
    Attribute(code="name", type="text"),
    Attribute(code="price", type="price"),
    Attribute(code="special_price", type="price"),
    Attribute(code="status", type="boolean"),
    Attribute(code="weight", type="text"),
    Attribute(code="tax_category_id", type="select"),
]
