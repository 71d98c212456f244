"""
Centralized settings and path configuration for catalog pricing.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "CATALOG_PRICING_"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Optional single-workbook source (one sheet per table)
    workbook: Optional[Path] = None

    # Tax behaviour
    tax_inclusive: bool = False

    # Display currency
    currency_code: str = "USD"
    currency_symbol: str = "$"
    currency_rate: float = 1.0

    # Customer group used when the requester has none
    default_customer_group_id: int = 1

    # Rounding
    display_precision: int = 2
    cart_precision: int = 4

    log_level: str = "INFO"

    @property
    def products_file(self) -> Path:
        return self.data_dir / 'products.csv'

    @property
    def tiers_file(self) -> Path:
        return self.data_dir / 'price_tiers.csv'

    @property
    def price_index_file(self) -> Path:
        return self.data_dir / 'price_indices.csv'

    @property
    def inventory_file(self) -> Path:
        return self.data_dir / 'inventories.csv'

    @property
    def tax_rates_file(self) -> Path:
        return self.data_dir / 'tax_rates.csv'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and CATALOG_PRICING_* environment variables."""
        root = project_root or get_project_root()

        data_dir = Path(_env('DATA_DIR', str(root / 'data')))
        workbook = _env('WORKBOOK')

        return cls(
            project_root=root,
            data_dir=data_dir,
            workbook=Path(workbook) if workbook else None,
            tax_inclusive=_env_bool('TAX_INCLUSIVE', False),
            currency_code=_env('CURRENCY', 'USD'),
            currency_symbol=_env('CURRENCY_SYMBOL', '$'),
            currency_rate=float(_env('CURRENCY_RATE', '1.0')),
            default_customer_group_id=int(_env('DEFAULT_GROUP', '1')),
            log_level=_env('LOG_LEVEL', 'INFO'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
