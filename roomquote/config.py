"""Configuration loading utilities for roomquote."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml


@dataclass
class PricingConfig:
    """Constants of the pricing model that are not read from the price list."""

    auxiliary_work_rate: float = 0.10
    auxiliary_material_rate: float = 0.10
    scaffolding_assembly_rate: float = 30.0
    scaffolding_rental_rate: float = 10.0
    floating_floor_waste: float = 1.1
    currency: str = "€"
    suggestions: int = 3


@dataclass
class StoreConfig:
    """Where work-item rows are persisted and how many writers run at once."""

    path: Path = Path("data/roomquote.sqlite")
    max_workers: int = 4

    def resolved(self, base_path: Path) -> "StoreConfig":
        return StoreConfig(path=_resolve_path(self.path, base_path), max_workers=self.max_workers)


@dataclass
class OutputConfig:
    """Paths describing where reports should be written."""

    directory: Path = Path("output")
    work_report: str = "work_items.csv"
    material_report: str = "material_items.csv"
    others_report: str = "other_items.csv"
    summary_report: str = "summary.csv"
    audit_log: str = "quote_audit.json"

    def resolved(self, base_path: Path) -> "OutputConfig":
        return OutputConfig(
            directory=_resolve_path(self.directory, base_path),
            work_report=self.work_report,
            material_report=self.material_report,
            others_report=self.others_report,
            summary_report=self.summary_report,
            audit_log=self.audit_log,
        )


@dataclass
class AppConfig:
    """Container for all configuration required by the CLI pipeline."""

    price_list: Path
    pricing: PricingConfig = field(default_factory=PricingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def resolved(self, base_path: Path) -> "AppConfig":
        return AppConfig(
            price_list=_resolve_path(self.price_list, base_path),
            pricing=self.pricing,
            store=self.store.resolved(base_path),
            output=self.output.resolved(base_path),
        )


def load_config(path: Path) -> AppConfig:
    """Load :class:`AppConfig` from a YAML file."""

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config: Mapping[str, Any] = yaml.safe_load(stream) or {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration root must be a mapping")

    paths_section = raw_config.get("paths") or {}
    if "price_list" not in paths_section:
        raise ValueError("Configuration must include 'paths.price_list'")

    pricing = PricingConfig(**_parse_section(PricingConfig, raw_config.get("pricing"), "pricing"))
    store_section = _parse_section(StoreConfig, raw_config.get("store"), "store")
    if "path" in store_section:
        store_section["path"] = Path(store_section["path"])
    output_section = _parse_section(OutputConfig, raw_config.get("output"), "output")
    if "directory" in output_section:
        output_section["directory"] = Path(output_section["directory"])

    if pricing.floating_floor_waste < 1:
        raise ValueError("pricing.floating_floor_waste must be at least 1")
    if StoreConfig(**store_section).max_workers < 1:
        raise ValueError("store.max_workers must be a positive integer")

    config = AppConfig(
        price_list=Path(paths_section["price_list"]),
        pricing=pricing,
        store=StoreConfig(**store_section),
        output=OutputConfig(**output_section),
    )
    return config.resolved(config_path.parent)


def _parse_section(cls: type, section: Any, name: str) -> Dict[str, Any]:
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Configuration section '{name}' must be a mapping")
    known = {field_info.name for field_info in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown keys in '{name}': {', '.join(unknown)}")
    return dict(section)


def _resolve_path(path: Path, base_path: Path) -> Path:
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_path / expanded).resolve()


__all__ = ["AppConfig", "OutputConfig", "PricingConfig", "StoreConfig", "load_config"]
