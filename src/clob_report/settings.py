"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_COINBASE_API_URL,
    DEFAULT_DEVNET_RPC_URL,
    DEFAULT_MAINNET_RPC_URL,
    KNOWN_MINT_SYMBOLS,
    PRICE_SOURCES,
    REFERENCE_CURRENCY,
    SUPPORTED_QUOTE_CURRENCIES,
)

load_dotenv()


class Network(str, Enum):
    MAINNET = "mainnet-beta"
    DEVNET = "devnet"


NETWORK_RPC_DEFAULTS = {
    Network.MAINNET: DEFAULT_MAINNET_RPC_URL,
    Network.DEVNET: DEFAULT_DEVNET_RPC_URL,
}


class ReportSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with CLOB_REPORT_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- ledger ---
    network: Network = Network.MAINNET
    rpc_url: str | None = None
    rpc_timeout: float = Field(default=15.0, gt=0)

    # --- markets ---
    markets: list[str] = Field(default_factory=list)
    mint_symbols: dict[str, str] = Field(default_factory=dict)

    # --- revenue ---
    reference_currency: str = REFERENCE_CURRENCY
    supported_currencies: list[str] = Field(
        default_factory=lambda: list(SUPPORTED_QUOTE_CURRENCIES)
    )

    # --- price oracle ---
    price_source: str = "coinbase"
    price_api_url: str = DEFAULT_COINBASE_API_URL
    price_timeout: float = Field(default=10.0, gt=0)

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CLOB_REPORT_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("reference_currency", mode="before")
    @classmethod
    def upper_reference(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("supported_currencies", mode="before")
    @classmethod
    def upper_supported(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [s.upper() if isinstance(s, str) else s for s in v]
        return v

    @field_validator("price_source", mode="before")
    @classmethod
    def known_price_source(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.lower()
            if v not in PRICE_SOURCES:
                raise ValueError(
                    f"Unknown price source '{v}'. Available: {', '.join(PRICE_SOURCES)}"
                )
        return v

    @field_validator("mint_symbols", mode="before")
    @classmethod
    def upper_symbols(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {k: s.upper() if isinstance(s, str) else s for k, s in v.items()}
        return v

    @model_validator(mode="after")
    def validate_reference_supported(self) -> "ReportSettings":
        """The reference currency must be one of the supported currencies."""
        if self.reference_currency not in self.supported_currencies:
            raise ValueError(
                f"reference_currency ({self.reference_currency}) must be one of "
                f"supported_currencies ({', '.join(self.supported_currencies)})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("CLOB_REPORT_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("clob-report.toml")
                    user_config = Path.home() / ".config" / "clob-report" / "config.toml"
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [clob_report]
                body = data.get("clob_report", data)
                if not isinstance(body, dict):
                    return {}
                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with RPC credentials redacted.

        Hosted RPC providers carry API keys in the query string or path
        suffix, so only scheme and host are kept.
        """
        data = self.model_dump(mode="json")
        if self.rpc_url:
            parts = urlsplit(self.rpc_url)
            if parts.query or parts.path.strip("/"):
                data["rpc_url"] = urlunsplit(
                    (parts.scheme, parts.netloc, "/***redacted***", "", "")
                )
        return data

    @property
    def rpc_url_required(self) -> str:
        """Get rpc_url, falling back to the public endpoint of the network."""
        return self.rpc_url or NETWORK_RPC_DEFAULTS[self.network]

    @property
    def mint_symbol_map(self) -> dict[str, str]:
        """Well-known mints overlaid with the configured ones."""
        return {**KNOWN_MINT_SYMBOLS, **self.mint_symbols}
