from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from .catalog import DEFAULT_PRODUCTS, EXTENDED_PRODUCTS, Catalog
from .discounts import BUILTIN_PROFILES, DiscountConfig
from .errors import ConfigError, InvalidArgumentError
from .money import ZERO, to_decimal
from .rules import DEFAULT_BULK_REBATE, DEFAULT_BULK_THRESHOLD

CATALOG_CHOICES = ("default", "extended")


@dataclass(frozen=True)
class Config:
    currency: str = "CNY"
    bulk_threshold: Decimal = DEFAULT_BULK_THRESHOLD
    bulk_rebate: Decimal = DEFAULT_BULK_REBATE
    catalog: str = "default"
    products: List[Dict[str, Any]] = field(default_factory=list)
    discount_profiles: Dict[str, Dict[str, Any]] = field(default_factory=lambda: _deep_merge(BUILTIN_PROFILES, None))
    log_level: str = "WARNING"


_ENV_PREFIX = "GROCER_"


def _find_pyproject(start_dir: Path) -> Path | None:
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / "pyproject.toml"
        if candidate.exists():
            return candidate
    return None


def _load_toml(path: Path) -> Dict[str, Any]:
    try:
        import tomllib  # py311+
    except ModuleNotFoundError:
        import tomli as tomllib

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc


def _to_amount(value: Any, name: str) -> Decimal:
    try:
        amount = to_decimal(value, name)
    except InvalidArgumentError as exc:
        raise ConfigError(exc.explanation) from exc
    if amount <= ZERO:
        raise ConfigError(f"{name} must be greater than 0, got {amount}")
    return amount


def _deep_merge(base: Dict[str, Any], patch: Dict[str, Any] | None) -> Dict[str, Any]:
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in base.items()}
    if not isinstance(patch, dict):
        return merged
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _from_sources(raw: Dict[str, Any]) -> Config:
    currency = os.getenv(f"{_ENV_PREFIX}CURRENCY", raw.get("currency", "CNY"))
    bulk_threshold = _to_amount(
        os.getenv(f"{_ENV_PREFIX}BULK_THRESHOLD", raw.get("bulk_threshold", DEFAULT_BULK_THRESHOLD)), "bulk_threshold"
    )
    bulk_rebate = _to_amount(
        os.getenv(f"{_ENV_PREFIX}BULK_REBATE", raw.get("bulk_rebate", DEFAULT_BULK_REBATE)), "bulk_rebate"
    )
    catalog = str(os.getenv(f"{_ENV_PREFIX}CATALOG", raw.get("catalog", "default"))).strip().lower()
    if catalog not in CATALOG_CHOICES:
        raise ConfigError(f"catalog must be one of {', '.join(CATALOG_CHOICES)}, got '{catalog}'")
    log_level = str(os.getenv(f"{_ENV_PREFIX}LOG_LEVEL", raw.get("log_level", "WARNING"))).upper()

    products = raw.get("products", [])
    if not isinstance(products, list):
        raise ConfigError("products must be an array of tables")

    profiles = raw.get("discount_profiles")
    if profiles is not None and not isinstance(profiles, dict):
        raise ConfigError("discount_profiles must be a table")

    return Config(
        currency=str(currency),
        bulk_threshold=bulk_threshold,
        bulk_rebate=bulk_rebate,
        catalog=catalog,
        products=[dict(entry) if isinstance(entry, dict) else entry for entry in products],
        discount_profiles=_deep_merge(BUILTIN_PROFILES, profiles),
        log_level=log_level,
    )


@lru_cache(maxsize=32)
def load_config(start_dir: str | os.PathLike[str] | None = None) -> Config:
    root = Path(start_dir or os.getcwd()).resolve()
    pyproject = _find_pyproject(root)
    if pyproject is None:
        return _from_sources({})

    parsed = _load_toml(pyproject)
    tool = parsed.get("tool", {}) if isinstance(parsed, dict) else {}
    grocer = tool.get("grocer", {}) if isinstance(tool, dict) else {}
    return _from_sources(grocer if isinstance(grocer, dict) else {})


def get_config() -> Config:
    return load_config(os.getcwd())


def refresh_config(start_dir: str | os.PathLike[str] | None = None) -> Config:
    load_config.cache_clear()
    return load_config(start_dir)


def build_catalog(config: Config) -> Catalog:
    """Seed catalog for ``config.catalog`` plus any configured products."""
    base = DEFAULT_PRODUCTS + EXTENDED_PRODUCTS if config.catalog == "extended" else DEFAULT_PRODUCTS
    try:
        return Catalog.from_entries(config.products, base=base)
    except InvalidArgumentError as exc:
        raise ConfigError(f"Invalid product in configuration: {exc.explanation}") from exc


def build_discounts(config: Config, profile: str | None) -> DiscountConfig | None:
    if profile is None:
        return None
    entry = config.discount_profiles.get(profile)
    if not isinstance(entry, dict):
        known = ", ".join(sorted(config.discount_profiles))
        raise ConfigError(f"Unknown discount profile '{profile}' (known: {known})")
    try:
        return DiscountConfig.from_profile(entry)
    except InvalidArgumentError as exc:
        raise ConfigError(f"Invalid discount profile '{profile}': {exc.explanation}") from exc
