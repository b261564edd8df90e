from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

DEFAULT_ACCOUNTS_PATH = "config/accounts.toml"
FALLBACK_ACCOUNT_NAME = "default"


@dataclass(frozen=True)
class Account:
    name: str
    starting_balance: float
    trades_path: Path
    active: bool = True


@dataclass(frozen=True)
class AccountsConfig:
    default_account: str | None = None
    accounts: dict[str, Account] = field(default_factory=dict)

    def pick(self, name: str | None) -> Account:
        """Return the named account, else the default, else the first active one listed."""
        chosen = name or self.default_account or self._first_active()
        try:
            return self.accounts[chosen]
        except KeyError:
            raise ValueError(f"Unknown account '{chosen}'.") from None

    def _first_active(self) -> str:
        for account_name, account in self.accounts.items():
            if account.active:
                return account_name
        raise ValueError("No active account in accounts config.")


def load_accounts_config(path: Path) -> AccountsConfig:
    if not path.exists():
        return AccountsConfig()
    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    accounts = {
        name: _account_from_table(name, table)
        for name, table in raw.get("accounts", {}).items()
        if isinstance(table, Mapping)
    }
    default_account = raw.get("default_account")
    if default_account and default_account not in accounts:
        raise ValueError(f"Default account '{default_account}' not found in accounts config.")
    return AccountsConfig(default_account=default_account, accounts=accounts)


def resolve_account_context(
    account_name: str | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> Account:
    """Select the account a report runs against.

    With an accounts file present the name comes from ``account_name``, then
    ``TRADE_ANALYTICS_ACCOUNT_NAME``, then the file's default. Without one, a
    single ad hoc account is built from ``TRADE_ANALYTICS_STARTING_BALANCE``
    and ``TRADE_ANALYTICS_DATA_DIR``.
    """
    env = os.environ if env is None else env
    path = Path(config_path or env.get("TRADE_ANALYTICS_ACCOUNTS_CONFIG", DEFAULT_ACCOUNTS_PATH))
    name = account_name or env.get("TRADE_ANALYTICS_ACCOUNT_NAME")

    config = load_accounts_config(path)
    if config.accounts:
        return config.pick(name)

    return Account(
        name=name or FALLBACK_ACCOUNT_NAME,
        starting_balance=_to_balance(env.get("TRADE_ANALYTICS_STARTING_BALANCE")),
        trades_path=Path(env.get("TRADE_ANALYTICS_DATA_DIR", "data")) / "trades.json",
    )


def _account_from_table(name: str, table: Mapping[str, Any]) -> Account:
    # camelCase keys are accepted for files exported by the journal frontend.
    balance = table["starting_balance"] if "starting_balance" in table else table.get("startingBalance")
    trades_path = table.get("trades_path") or table.get("tradesPath") or f"data/{name}/trades.json"
    active = table.get("active")
    return Account(
        name=name,
        starting_balance=_to_balance(balance),
        trades_path=Path(trades_path),
        active=True if active is None else bool(active),
    )


def _to_balance(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return 0.0
    try:
        return float(str(value).strip() or 0)
    except ValueError:
        return 0.0
