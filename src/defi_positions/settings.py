"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .logger import parse_level

load_dotenv()

CONFIG_ENV_VAR = "DEFI_POSITIONS_CONFIG"
CONFIG_TABLE = "defi_positions"
SECRET_FIELDS = frozenset({"coingecko_api_key", "exchange_rate_api_key"})
COINGECKO_PUBLIC_API_URL = "https://api.coingecko.com/api/v3"
COINGECKO_PRO_API_URL = "https://pro-api.coingecko.com/api/v3"


class TrackerSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with DEFI_POSITIONS_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- price sources ---
    # with a key set, the public default is swapped for the pro host
    coingecko_api_url: str = COINGECKO_PUBLIC_API_URL
    coingecko_api_key: SecretStr | None = None
    maiar_graphql_url: str = "https://graph.maiar.exchange/graphql"
    exchange_rate_api_url: str = "https://api.api-ninjas.com/v1/exchangerate"
    exchange_rate_api_key: SecretStr | None = None
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout (seconds) handed to the HTTP client for every price request.",
    )

    # extra network id -> CoinGecko platform slug, merged over the built-in table
    price_platforms: dict[int, str] = Field(default_factory=dict)

    # --- storage ---
    positions_file: Path = Path("positions.json")

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DEFI_POSITIONS_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("coingecko_api_key", "exchange_rate_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            parse_level(v)
            return v.upper()
        return v

    @model_validator(mode="after")
    def use_pro_host_with_key(self) -> "TrackerSettings":
        """Point the default CoinGecko host at the pro API when a key is given.

        Pro keys are rejected by the public host. Any other host is left
        alone.
        """
        if (
            self.coingecko_api_key is not None
            and self.coingecko_api_url.rstrip("/") == COINGECKO_PUBLIC_API_URL
        ):
            self.coingecko_api_url = COINGECKO_PRO_API_URL
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
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
        cfg_path = Path(env_cfg) if env_cfg else None

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data


class TomlConfigSource(PydanticBaseSettingsSource):
    """Reads settings from a TOML file (top-level keys or a [defi_positions] table)."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self._path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def _resolve_path(self) -> Path | None:
        if self._path:
            return self._path
        local_config = Path("defi-positions.toml")
        user_config = Path.home() / ".config" / "defi-positions" / "config.toml"
        if local_config.exists():
            return local_config
        if user_config.exists():
            return user_config
        return None

    def __call__(self) -> dict[str, Any]:
        path = self._resolve_path()
        if path is None or not path.exists():
            return {}

        with path.open("rb") as f:
            data = tomllib.load(f)
        body = data.get(CONFIG_TABLE, data)
        if not isinstance(body, dict):
            return {}

        for key in SECRET_FIELDS:
            if key in body:
                raise ValueError(
                    f"Security violation: '{key}' found in TOML config file. "
                    f"Secrets must only be provided via environment variables or CLI flags."
                )

        return body
