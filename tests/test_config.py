from __future__ import annotations

from pathlib import Path

import pytest

from trade_analytics.config.accounts import load_accounts_config, resolve_account_context
from trade_analytics.config.app_config import load_app_config


def test_app_config_defaults_when_file_missing(tmp_path):
    config = load_app_config(tmp_path / "missing.toml", env={})
    assert config.app.port == 8000
    assert config.app.reload is False
    assert config.app.log_level == "INFO"
    assert config.analytics.batch_size == 10
    assert config.analytics.daily_window_days == 30
    assert config.analytics.contract_multiplier == 100


def test_app_config_reads_toml_and_rejects_bad_values(tmp_path):
    path = tmp_path / "app.toml"
    path.write_text(
        '[app]\nport = 9001\nlog_level = "debug"\n\n[analytics]\nbatch_size = 5\ntrend_points = -1\ncache_size = "x"\n',
        encoding="utf-8",
    )
    config = load_app_config(path, env={})
    assert config.app.port == 9001
    assert config.app.log_level == "DEBUG"
    assert config.analytics.batch_size == 5
    assert config.analytics.trend_points == 10
    assert config.analytics.cache_size == 64


def test_app_config_path_from_env(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text("[analytics]\nbatch_size = 20\n", encoding="utf-8")
    config = load_app_config(env={"TRADE_ANALYTICS_CONFIG": str(path)})
    assert config.analytics.batch_size == 20


def write_accounts(tmp_path: Path) -> Path:
    path = tmp_path / "accounts.toml"
    path.write_text(
        'default_account = "main"\n\n'
        "[accounts.main]\nstarting_balance = 10000\ntrades_path = \"data/main.json\"\n\n"
        "[accounts.paper]\nstartingBalance = \"2500.5\"\nactive = false\n",
        encoding="utf-8",
    )
    return path


def test_accounts_config_parses_accounts(tmp_path):
    config = load_accounts_config(write_accounts(tmp_path))
    assert config.default_account == "main"
    assert config.accounts["main"].starting_balance == 10000.0
    assert config.accounts["main"].trades_path == Path("data/main.json")
    assert config.accounts["paper"].starting_balance == 2500.5
    assert config.accounts["paper"].trades_path == Path("data/paper/trades.json")
    assert config.accounts["paper"].active is False


def test_resolve_account_context_prefers_explicit_then_env_then_default(tmp_path):
    path = write_accounts(tmp_path)
    assert resolve_account_context(env={}, config_path=path).name == "main"
    assert resolve_account_context(env={"TRADE_ANALYTICS_ACCOUNT_NAME": "paper"}, config_path=path).name == "paper"
    assert resolve_account_context("main", env={"TRADE_ANALYTICS_ACCOUNT_NAME": "paper"}, config_path=path).name == "main"
    with pytest.raises(ValueError):
        resolve_account_context("missing", env={}, config_path=path)


def test_resolve_account_context_without_config_uses_env(tmp_path):
    env = {
        "TRADE_ANALYTICS_DATA_DIR": str(tmp_path),
        "TRADE_ANALYTICS_STARTING_BALANCE": "1500",
    }
    context = resolve_account_context(env=env, config_path=tmp_path / "none.toml")
    assert context.name == "default"
    assert context.starting_balance == 1500.0
    assert context.trades_path == tmp_path / "trades.json"


def test_unknown_default_account_is_rejected(tmp_path):
    path = tmp_path / "accounts.toml"
    path.write_text('default_account = "ghost"\n', encoding="utf-8")
    with pytest.raises(ValueError):
        load_accounts_config(path)


def test_fallback_account_skips_inactive_entries(tmp_path):
    path = tmp_path / "accounts.toml"
    path.write_text(
        "[accounts.archived]\nstarting_balance = 1\nactive = false\n\n"
        "[accounts.live]\nstarting_balance = 750\n",
        encoding="utf-8",
    )
    context = resolve_account_context(env={}, config_path=path)
    assert context.name == "live"
    assert context.starting_balance == 750.0
    assert resolve_account_context("archived", env={}, config_path=path).active is False


def test_fallback_account_requires_an_active_entry(tmp_path):
    path = tmp_path / "accounts.toml"
    path.write_text("[accounts.archived]\nactive = false\n", encoding="utf-8")
    with pytest.raises(ValueError):
        resolve_account_context(env={}, config_path=path)
