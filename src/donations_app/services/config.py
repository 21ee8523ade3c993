"""Client configuration loaded from an rc file with environment overrides."""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

CONFIG_PATH_ENV_VAR = "DONATIONS_CONFIG_PATH"
ENV_PREFIX = "DONATIONS_"
RC_FILENAMES = (".donationsrc", "config/donations.toml")
DEFAULT_APP_NAME = "donations-app"
DEFAULT_ENVIRONMENT_KEY = "local"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_PASSWORD_MIN_LENGTH = 8
DEFAULT_LOCALE = "en"

_TRUE_VALUES = {"1", "true", "yes", "on"}

logger = logging.getLogger("donations.config")


def _normalise_key(value: str) -> str:
    return value.strip().upper()


def _json_or_raw(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def parse_toml(raw: str) -> Dict[str, Any]:
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as error:
        raise ValueError("not TOML") from error


def parse_json(raw: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as error:
        raise ValueError("not JSON") from error
    if not isinstance(data, dict):
        raise ValueError("JSON configuration must be an object")
    return data


def parse_key_values(raw: str) -> Dict[str, Any]:
    """Parse ``key = value`` lines, skipping blanks and ``#`` comments."""

    data: Dict[str, Any] = {}
    for number, line in enumerate(raw.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        if not sep:
            raise ValueError(f"line {number} is not a key=value pair")
        data[key.strip()] = value.strip().strip('"')
    return data


RC_PARSERS: tuple[Callable[[str], Dict[str, Any]], ...] = (parse_toml, parse_json, parse_key_values)


def read_rc_file(path: Path) -> Dict[str, Any]:
    """Return the rc file as a dict with upper-cased keys; empty when unreadable."""

    raw_text = path.read_text(encoding="utf-8")
    if not raw_text.strip():
        return {}
    for parser in RC_PARSERS:
        try:
            data = parser(raw_text)
        except ValueError:
            continue
        return {_normalise_key(key): value for key, value in data.items()}
    logger.warning("config.unparseable", extra={"path": str(path)})
    return {}


class ConfigSession:
    """In-memory view over the ``.donationsrc`` file and the environment.

    Keys are case-insensitive. Values from the rc file win; missing keys fall
    back to ``DONATIONS_<KEY>`` environment variables, decoded as JSON when
    possible.
    """

    def __init__(
        self,
        *,
        execution_root: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.execution_root = Path(execution_root or Path.cwd())
        self._env = env if env is not None else os.environ
        self._local_store: dict[str, Any] = {}

    def load(self) -> "ConfigSession":
        path = self.rc_path()
        if path is None:
            logger.debug("config.missing", extra={"root": str(self.execution_root)})
            self._local_store = {}
        else:
            self._local_store = read_rc_file(path)
        return self

    def rc_path(self) -> Path | None:
        explicit = self._env.get(CONFIG_PATH_ENV_VAR)
        if explicit:
            path = Path(explicit).expanduser()
            return path if path.exists() else None
        for name in RC_FILENAMES:
            candidate = self.execution_root / name
            if candidate.exists():
                return candidate
        return None

    # ------------------------------------------------------------------ resolution
    def get(self, key: str, default: Any = None) -> Any:
        lookup_key = _normalise_key(key)
        value = self._local_store.get(lookup_key)
        if value is not None and value != "":
            return value
        env_key = f"{ENV_PREFIX}{lookup_key}"
        if env_key in self._env:
            return _json_or_raw(self._env[env_key])
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    def get_float(self, key: str, default: float | None = None) -> float | None:
        value = self.get(key)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("config.invalid_number", extra={"key": key, "value": value})
            return default

    def get_int(self, key: str, default: int) -> int:
        value = self.get_float(key)
        return default if value is None else int(value)


@dataclass(slots=True)
class ClientSettings:
    """Non-sensitive settings hydrated at start-up."""

    app_name: str = DEFAULT_APP_NAME
    app_version: str = "dev"
    environment_key: str = DEFAULT_ENVIRONMENT_KEY
    api_base_url: str = ""
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    login_timeout_seconds: float | None = None
    password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH
    locale: str = DEFAULT_LOCALE
    use_fake_gateway: bool = True
    fake_latency_seconds: float = 0.5

    def public_config(self) -> Dict[str, Any]:
        return {
            "app_name": self.app_name,
            "app_version": self.app_version,
            "environment": self.environment_key,
            "api_base_url": self.api_base_url,
            "locale": self.locale,
            "fake_gateway": self.use_fake_gateway,
        }


def load_client_settings(config: ConfigSession) -> ClientSettings:
    api_base_url = str(config.get("API_BASE_URL") or "").rstrip("/")
    password_min_length = config.get_int("PASSWORD_MIN_LENGTH", DEFAULT_PASSWORD_MIN_LENGTH)
    return ClientSettings(
        app_name=str(config.get("APP_NAME", DEFAULT_APP_NAME)),
        app_version=str(config.get("APP_VERSION", "dev")),
        environment_key=str(config.get("ENVIRONMENT_KEY", DEFAULT_ENVIRONMENT_KEY)).lower(),
        api_base_url=api_base_url,
        request_timeout_seconds=config.get_float(
            "REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS
        ),
        login_timeout_seconds=config.get_float("LOGIN_TIMEOUT_SECONDS"),
        password_min_length=max(1, password_min_length),
        locale=str(config.get("LOCALE", DEFAULT_LOCALE)),
        use_fake_gateway=config.get_bool("USE_FAKE_GATEWAY", default=not api_base_url),
        fake_latency_seconds=config.get_float("FAKE_LATENCY_SECONDS", 0.5),
    )


def bootstrap_settings(
    *,
    execution_root: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> ClientSettings:
    """Read the rc file under ``execution_root`` and hydrate the settings."""

    return load_client_settings(ConfigSession(execution_root=execution_root, env=env).load())
