from pathlib import Path

import pytest

from roomquote.config import load_config

ROOT = Path(__file__).resolve().parent.parent


def test_default_config_resolves_relative_paths():
    config = load_config(ROOT / "config" / "config.yaml")
    assert config.price_list == (ROOT / "config" / "price_list.yaml").resolve()
    assert config.price_list.exists()
    assert config.output.directory == (ROOT / "output").resolve()
    assert config.store.path.name == "roomquote.sqlite"
    assert config.store.max_workers == 4
    assert config.pricing.floating_floor_waste == pytest.approx(1.1)
    assert config.pricing.scaffolding_assembly_rate == pytest.approx(30)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_minimal_config_uses_defaults(tmp_path: Path):
    config = load_config(_write(tmp_path, "paths:\n  price_list: prices.yaml\n"))
    assert config.price_list == (tmp_path / "prices.yaml").resolve()
    assert config.pricing.auxiliary_work_rate == pytest.approx(0.10)
    assert config.output.work_report == "work_items.csv"
    assert config.output.directory == (tmp_path / "output").resolve()


def test_missing_price_list_path_is_an_error(tmp_path: Path):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "pricing:\n  currency: CZK\n"))


def test_unknown_keys_are_rejected(tmp_path: Path):
    with pytest.raises(ValueError, match="surcharge"):
        load_config(_write(tmp_path, "paths:\n  price_list: p.yaml\npricing:\n  surcharge: 3\n"))


def test_invalid_values_are_rejected(tmp_path: Path):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "paths:\n  price_list: p.yaml\npricing:\n  floating_floor_waste: 0.9\n"))
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "paths:\n  price_list: p.yaml\nstore:\n  max_workers: 0\n"))
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "- just\n- a list\n"))


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")
