from pathlib import Path

import pytest

from pos_finsight.config import AppConfig, load_app_config


def test_load_app_config_full_file(tmp_path) -> None:
    cfg_path = tmp_path / "pos_finsight_config.toml"
    cfg_path.write_text(
        """
[store]
currency = "USD"

[data]
dir = "snapshot"

[reports]
default_preset = "lastMonth"
default_type = "financial"
top_n = 7
dashboard_top_n = 3
segment_low = 100
segment_high = 250

[documents]
items_per_page = 12
delivery_note_template = "detailed"

[display]
mode = "both"
decimals = 0
""",
        encoding="utf-8",
    )

    config = load_app_config(str(cfg_path))

    assert config.currency == "USD"
    assert config.data_dir == (tmp_path / "snapshot").resolve()
    assert config.reports.default_preset == "lastMonth"
    assert config.reports.default_type == "financial"
    assert config.reports.top_n == 7
    assert config.reports.dashboard_top_n == 3
    assert config.reports.segment_low == 100.0
    assert config.reports.segment_high == 250.0
    assert config.documents.items_per_page == 12
    assert config.documents.delivery_note_template == "detailed"
    assert config.display.mode == "both"
    assert config.display.decimals == 0


def test_load_app_config_empty_file_uses_defaults(tmp_path) -> None:
    cfg_path = tmp_path / "config.toml"
    cfg_path.write_text("", encoding="utf-8")

    config = load_app_config(str(cfg_path))
    defaults = AppConfig()

    assert config.currency == "NLe"
    assert config.data_dir == (tmp_path / "data").resolve()
    assert config.reports == defaults.reports
    assert config.documents == defaults.documents
    assert config.display == defaults.display


def test_load_app_config_default_path_in_cwd(tmp_path, monkeypatch) -> None:
    (tmp_path / "pos_finsight_config.toml").write_text(
        '[store]\ncurrency = "EUR"\n', encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    assert load_app_config().currency == "EUR"


def test_missing_config_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))


def test_invalid_toml_raises_value_error(tmp_path) -> None:
    cfg_path = tmp_path / "broken.toml"
    cfg_path.write_text("[store\ncurrency = ", encoding="utf-8")

    with pytest.raises(ValueError):
        load_app_config(str(cfg_path))


@pytest.mark.parametrize(
    "content",
    [
        '[reports]\ndefault_preset = "nextYear"\n',
        '[reports]\ndefault_type = "payroll"\n',
        "[reports]\ntop_n = 0\n",
        "[reports]\nsegment_low = 900\nsegment_high = 100\n",
        '[documents]\nitems_per_page = "many"\n',
        '[display]\nmode = "html"\n',
        'store = "NLe"\n',
    ],
)
def test_invalid_values_raise_value_error(tmp_path, content) -> None:
    cfg_path = tmp_path / "config.toml"
    cfg_path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_app_config(str(cfg_path))


def test_example_config_at_repository_root_is_valid() -> None:
    root_config = Path(__file__).resolve().parents[1] / "pos_finsight_config.toml"

    config = load_app_config(str(root_config))

    assert config.currency == "NLe"
    assert config.reports.default_preset == "thisMonth"
