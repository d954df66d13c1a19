# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for POS FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating it and filling in defaults,
- exposing typed dataclasses used by the rest of the application.

Every section of the file is optional; a missing section falls back to the
defaults documented on each dataclass.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .periods import PRESETS

REPORT_TYPES = ("sales", "customers", "products", "financial", "inventory")
DISPLAY_MODES = ("table", "csv", "both")


@dataclass(frozen=True)
class ReportsConfig:
    """
    Report defaults.

    default_preset:
        Quick-filter preset used when no dates are given (thisMonth).
    default_type:
        Report type used when none is requested (sales).
    top_n / dashboard_top_n:
        Length of ranked lists in reports (10) and dashboards (5).
    segment_low / segment_high:
        Customer segment thresholds on net spend (500 / 1000).
    """

    default_preset: str = "thisMonth"
    default_type: str = "sales"
    top_n: int = 10
    dashboard_top_n: int = 5
    segment_low: float = 500.0
    segment_high: float = 1000.0


@dataclass(frozen=True)
class DocumentsConfig:
    items_per_page: int = 10
    delivery_note_template: str = "compact"


@dataclass(frozen=True)
class DisplayConfig:
    mode: str = "table"
    decimals: int = 2


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for POS FinSight.

    This aggregates:
    - the store currency (amounts are formatted with it),
    - the directory holding the CSV snapshot of sales, returns, invoices...,
    - report defaults, document pagination and display options.
    """

    currency: str = "NLe"
    data_dir: Path = Path("data")
    reports: ReportsConfig = field(default_factory=ReportsConfig)
    documents: DocumentsConfig = field(default_factory=DocumentsConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _positive_int(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc
    if value < 1:
        raise ValueError(f"'{where}.{key}' must be at least 1.")
    return value


def _parse_reports(section: Mapping[str, Any]) -> ReportsConfig:
    defaults = ReportsConfig()

    preset = str(section.get("default_preset", defaults.default_preset))
    if preset not in PRESETS:
        raise ValueError(
            f"Unknown reports.default_preset {preset!r}. "
            f"Expected one of: {', '.join(PRESETS)}."
        )

    report_type = str(section.get("default_type", defaults.default_type))
    if report_type not in REPORT_TYPES:
        raise ValueError(
            f"Unknown reports.default_type {report_type!r}. "
            f"Expected one of: {', '.join(REPORT_TYPES)}."
        )

    try:
        low = float(section.get("segment_low", defaults.segment_low))
        high = float(section.get("segment_high", defaults.segment_high))
    except (TypeError, ValueError) as exc:
        raise ValueError("Customer segment thresholds must be numbers.") from exc
    if high < low:
        raise ValueError("reports.segment_high cannot be below reports.segment_low.")

    return ReportsConfig(
        default_preset=preset,
        default_type=report_type,
        top_n=_positive_int(section, "top_n", defaults.top_n, "reports"),
        dashboard_top_n=_positive_int(
            section, "dashboard_top_n", defaults.dashboard_top_n, "reports"
        ),
        segment_low=low,
        segment_high=high,
    )


def _parse_documents(section: Mapping[str, Any]) -> DocumentsConfig:
    defaults = DocumentsConfig()
    return DocumentsConfig(
        items_per_page=_positive_int(
            section, "items_per_page", defaults.items_per_page, "documents"
        ),
        delivery_note_template=str(
            section.get("delivery_note_template", defaults.delivery_note_template)
        ),
    )


def _parse_display(section: Mapping[str, Any]) -> DisplayConfig:
    mode = str(section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Unknown display.mode {mode!r}. Expected one of: table, csv, both."
        )
    try:
        decimals = int(section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2
    return DisplayConfig(mode=mode, decimals=decimals)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the POS FinSight configuration from a TOML file.

    Expected sections in the TOML file (all optional)
    --------------------------------------------------
    [store]
        currency: store currency code used for display (default "NLe").

    [data]
        dir: directory of the CSV snapshot (default "data"), resolved
        relative to the TOML file.

    [reports]
        default_preset, default_type, top_n, dashboard_top_n,
        segment_low, segment_high.

    [documents]
        items_per_page (default 10), delivery_note_template.

    [display]
        mode ("table", "csv" or "both") and decimals.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML file. Defaults to 'pos_finsight_config.toml' in the
        current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path("pos_finsight_config.toml").resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    store_section = _section(raw, "store")
    currency = str(store_section.get("currency") or "NLe")

    data_section = _section(raw, "data")
    data_dir = (base_dir / str(data_section.get("dir") or "data")).resolve()

    return AppConfig(
        currency=currency,
        data_dir=data_dir,
        reports=_parse_reports(_section(raw, "reports")),
        documents=_parse_documents(_section(raw, "documents")),
        display=_parse_display(_section(raw, "display")),
    )
