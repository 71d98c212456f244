"""
Catalog Store - loads products, price tiers, price index rows, inventories and
tax rates from CSV files or a single Excel workbook.

The store backs the abstract collaborators of the pricing engine
(PriceTierStore, PriceIndexStore, InventoryChecker) for the API, the UI and
scripts. Tables are read once with pandas and grouped per product.
"""
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..catalog.attributes import PRODUCT_ATTRIBUTES, normalize_attribute_values
from ..config.settings import Settings, get_settings
from ..engine.interfaces import InventoryChecker, PriceIndexStore, PriceTierStore
from ..engine.models import (
    PriceIndexEntry, PriceTier, Product, ProductStatus, TaxRate, TierValueType,
)
from ..exceptions import DataSourceError, InvalidAttributeValueError, ProductNotFoundError

logger = logging.getLogger(__name__)

TABLE_COLUMNS = {
    'products': ['id', 'sku', 'name', 'type', 'price', 'status', 'parent_id',
                 'special_price', 'tax_category_id', 'weight'],
    'price_tiers': ['product_id', 'qty', 'customer_group_id', 'value', 'value_type'],
    'price_indices': ['product_id', 'customer_group_id', 'min_price', 'max_price',
                      'regular_min_price', 'regular_max_price'],
    'inventories': ['product_id', 'inventory_source_id', 'qty'],
    'ordered_inventories': ['product_id', 'qty'],
    'tax_rates': ['tax_category_id', 'country', 'state', 'zip_from', 'zip_to', 'tax_rate'],
}

INACTIVE_STATUSES = {'0', 'false', 'inactive', 'disabled', 'no'}
DISCOUNT_TYPES = {'discount', 'percent', 'percentage'}


def _optional_int(value) -> Optional[int]:
    if value is None or pd.isna(value) or str(value).strip() == '':
        return None
    return int(float(value))


def _optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value) or str(value).strip() == '':
        return None
    return float(value)


def _optional_str(value) -> Optional[str]:
    if value is None or pd.isna(value) or str(value).strip() == '':
        return None
    return str(value).strip()


def _empty(table: str) -> pd.DataFrame:
    return pd.DataFrame(columns=TABLE_COLUMNS[table])


def read_tables(settings: Settings) -> dict[str, pd.DataFrame]:
    """
    Read every catalog table from the workbook or the data directory.

    Raises:
        DataSourceError: If the products table cannot be found
    """
    tables: dict[str, pd.DataFrame] = {}

    if settings.workbook is not None:
        if not settings.workbook.exists():
            raise DataSourceError(
                f"Catalog workbook not found at {settings.workbook}.",
                details={'path': str(settings.workbook)}
            )
        sheets = pd.read_excel(settings.workbook, sheet_name=None, dtype=str)
        for table in TABLE_COLUMNS:
            tables[table] = sheets.get(table, _empty(table))
    else:
        if not settings.products_file.exists():
            raise DataSourceError(
                f"products.csv not found in {settings.data_dir}.",
                details={'path': str(settings.data_dir)}
            )
        for table in TABLE_COLUMNS:
            path = settings.data_dir / f'{table}.csv'
            if path.exists():
                tables[table] = pd.read_csv(path, dtype=str)
            else:
                tables[table] = _empty(table)

    # Normalize headers and string cells
    for table, df in tables.items():
        df.columns = [str(c).strip() for c in df.columns]
        missing = [c for c in TABLE_COLUMNS[table] if c not in df.columns]
        for col in missing:
            df[col] = None
        tables[table] = df

    return tables


def parse_products(df: pd.DataFrame) -> dict[int, Product]:
    products: dict[int, Product] = {}
    parent_ids: dict[int, int] = {}

    for row in df.to_dict(orient='records'):
        try:
            product_id = _optional_int(row['id'])
            price = _optional_float(row['price'])
        except (TypeError, ValueError):
            product_id = price = None

        if product_id is None or price is None:
            logger.warning("Skipping product row without id or price: %s", row)
            continue

        status = str(row['status']).strip().lower() if _optional_str(row['status']) else 'active'

        products[product_id] = Product(
            id=product_id,
            sku=_optional_str(row['sku']) or str(product_id),
            name=_optional_str(row['name']) or "",
            type=(_optional_str(row['type']) or 'simple').lower(),
            price=price,
            status=ProductStatus.INACTIVE if status in INACTIVE_STATUSES else ProductStatus.ACTIVE,
            special_price=_optional_float(row['special_price']),
            tax_category_id=_optional_int(row['tax_category_id']),
            weight=_optional_float(row['weight']) or 0.0,
        )

        parent_id = _optional_int(row['parent_id'])
        if parent_id is not None:
            parent_ids[product_id] = parent_id

    for product_id, parent_id in parent_ids.items():
        parent = products.get(parent_id)
        if parent is None:
            logger.warning("Product %s references missing parent %s", product_id, parent_id)
            continue
        products[product_id].parent = parent

    return products


def parse_tiers(df: pd.DataFrame) -> dict[int, list[PriceTier]]:
    """Group tier rows per product, dropping rows that cannot be priced."""
    tiers: dict[int, list[PriceTier]] = {}
    dropped = 0

    for row in df.to_dict(orient='records'):
        try:
            product_id = _optional_int(row['product_id'])
            qty = _optional_int(row['qty'])
            value = _optional_float(row['value'])
        except (TypeError, ValueError):
            dropped += 1
            continue

        if product_id is None or qty is None or value is None or qty < 1:
            dropped += 1
            continue

        value_type = str(row['value_type'] or '').strip().lower()
        tiers.setdefault(product_id, []).append(PriceTier(
            qty=qty,
            value=value,
            value_type=TierValueType.DISCOUNT if value_type in DISCOUNT_TYPES else TierValueType.FIXED,
            customer_group_id=_optional_int(row['customer_group_id']),
            product_id=product_id,
        ))

    if dropped:
        logger.warning("Dropped %d malformed price tier rows", dropped)

    return tiers


def parse_price_indices(df: pd.DataFrame) -> dict[int, list[PriceIndexEntry]]:
    indices: dict[int, list[PriceIndexEntry]] = {}

    for row in df.to_dict(orient='records'):
        try:
            entry = PriceIndexEntry(
                product_id=int(float(row['product_id'])),
                customer_group_id=int(float(row['customer_group_id'])),
                min_price=float(row['min_price']),
                max_price=float(row['max_price']),
                regular_min_price=float(row['regular_min_price']),
                regular_max_price=float(row['regular_max_price']),
            )
        except (TypeError, ValueError):
            logger.warning("Skipping malformed price index row: %s", row)
            continue
        indices.setdefault(entry.product_id, []).append(entry)

    return indices


def parse_tax_rates(df: pd.DataFrame) -> list[TaxRate]:
    rates = []
    for row in df.to_dict(orient='records'):
        tax_category_id = _optional_int(row['tax_category_id'])
        rate = _optional_float(row['tax_rate'])
        country = _optional_str(row['country'])
        if tax_category_id is None or rate is None or country is None:
            continue
        rates.append(TaxRate(
            tax_category_id=tax_category_id,
            country=country,
            tax_rate=rate,
            state=_optional_str(row['state']),
            zip_from=_optional_str(row['zip_from']),
            zip_to=_optional_str(row['zip_to']),
        ))
    return rates


class DataFrameTierStore(PriceTierStore):

    def __init__(self, tiers: dict[int, list[PriceTier]]):
        self.tiers = tiers

    def for_product(self, product_id: int) -> list[PriceTier]:
        return list(self.tiers.get(product_id, []))


class DataFrameIndexStore(PriceIndexStore):

    def __init__(self, indices: dict[int, list[PriceIndexEntry]]):
        self.indices = indices

    def for_product(self, product_id: int) -> list[PriceIndexEntry]:
        return list(self.indices.get(product_id, []))


class DataFrameInventory(InventoryChecker):
    """
    Stock on the channel's inventory sources minus quantities already ordered.

    Args:
        inventories: Rows of product_id, inventory_source_id, qty
        ordered: Rows of product_id, qty
        channel_sources: Inventory source ids of the current channel (None = all)
    """

    def __init__(self, inventories: pd.DataFrame, ordered: pd.DataFrame, channel_sources: Optional[Iterable[int]] = None):
        inventories = inventories.copy()
        for col in ('product_id', 'inventory_source_id', 'qty'):
            inventories[col] = pd.to_numeric(inventories[col], errors='coerce')
        self.inventories = inventories.dropna(subset=['product_id', 'qty'])

        ordered = ordered.copy()
        for col in ('product_id', 'qty'):
            ordered[col] = pd.to_numeric(ordered[col], errors='coerce')
        self.ordered = ordered.dropna(subset=['product_id', 'qty'])

        self.channel_sources = set(channel_sources) if channel_sources is not None else None

    def total_available(self, product: Product) -> int:
        rows = self.inventories[self.inventories['product_id'] == product.id]
        if self.channel_sources is not None:
            rows = rows[rows['inventory_source_id'].isin(self.channel_sources)]

        total = int(rows['qty'].sum())

        ordered = self.ordered[self.ordered['product_id'] == product.id]
        if not ordered.empty:
            total -= int(ordered.iloc[0]['qty'])

        return total


class CatalogStore:
    """
    In-memory catalog backed by pandas tables.

    Exposes `tiers`, `price_indices` and `inventory` as the engine's
    collaborator implementations and `tax_rates` for TableTaxCalculator.
    """

    def __init__(self, tables: dict[str, pd.DataFrame], channel_sources: Optional[Iterable[int]] = None):
        self.products = parse_products(tables['products'])
        self.tiers = DataFrameTierStore(parse_tiers(tables['price_tiers']))
        self.price_indices = DataFrameIndexStore(parse_price_indices(tables['price_indices']))
        self.inventory = DataFrameInventory(tables['inventories'], tables['ordered_inventories'], channel_sources)
        self.tax_rates = parse_tax_rates(tables['tax_rates'])

        logger.info(
            "Loaded catalog: %d products, %d products with tiers, %d with price index rows",
            len(self.products), len(self.tiers.tiers), len(self.price_indices.indices)
        )

    @classmethod
    def load(cls, settings: Optional[Settings] = None, channel_sources: Optional[Iterable[int]] = None) -> 'CatalogStore':
        settings = settings or get_settings()
        return cls(read_tables(settings), channel_sources)

    @classmethod
    def from_directory(cls, data_dir: Path) -> 'CatalogStore':
        data_dir = Path(data_dir)
        return cls(read_tables(Settings(project_root=data_dir, data_dir=data_dir)))

    def get_product(self, product_id: int) -> Product:
        try:
            return self.products[product_id]
        except KeyError:
            raise ProductNotFoundError(product_id) from None

    def find_by_sku(self, sku: str) -> Optional[Product]:
        sku = str(sku).strip()
        for product in self.products.values():
            if product.sku == sku:
                return product
        return None

    def update_product(self, product_id: int, data: dict, mass_update: bool = False) -> Product:
        """
        Apply submitted attribute values to a product.

        Values are normalized per attribute type first. A single-product edit
        is a full form submission, so an absent status means disabled; mass
        updates leave status alone. An empty price keeps the current base
        price, an empty special price clears it.

        Raises:
            ProductNotFoundError: If the product does not exist
            InvalidAttributeValueError: If a numeric attribute cannot be parsed
        """
        product = self.get_product(product_id)
        values = normalize_attribute_values(data, PRODUCT_ATTRIBUTES, mass_update=mass_update)

        def number(code, parse):
            try:
                return parse(values[code])
            except (TypeError, ValueError):
                raise InvalidAttributeValueError(code, values[code]) from None

        if _optional_str(values.get('sku')):
            product.sku = _optional_str(values['sku'])
        if 'name' in values:
            product.name = _optional_str(values['name']) or ""
        if values.get('price') is not None:
            product.price = number('price', _optional_float)
        if 'special_price' in values:
            product.special_price = number('special_price', _optional_float)
        if 'status' in values:
            product.status = ProductStatus.ACTIVE if values['status'] else ProductStatus.INACTIVE
        if 'weight' in values:
            product.weight = number('weight', _optional_float) or 0.0
        if 'tax_category_id' in values:
            product.tax_category_id = number('tax_category_id', _optional_int)

        logger.info("Updated product %s (%s)", product.id, ", ".join(sorted(data)) or "no fields")
        return product
