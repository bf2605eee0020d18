"""
YAML configuration loader.

Reads config.yaml and produces typed StatusPageConfig / SyncSettings
objects. Credentials and the port can be overridden from the environment.
Falls back to defaults if the config file is missing.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from statuspage_sync import notifier
from statuspage_sync.exceptions import ConfigError
from statuspage_sync.models import StatusPageConfig, SyncSettings

# Default path: config.yaml next to the project root
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key wins; lets older camelCase/upper-case keys through."""
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(
    path: str | Path | None = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[StatusPageConfig, SyncSettings]:
    """
    Load and parse the YAML configuration file.

    Returns:
        A tuple of (StatusPageConfig, SyncSettings).

    Raises:
        ConfigError: If the file does not hold a YAML mapping.
    """
    env = os.environ if env is None else env
    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    raw: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r") as fh:
            loaded = yaml.safe_load(fh)
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping at top level")
        raw = loaded or {}
    else:
        notifier.print_notice(f"Config file not found at {config_path}, using defaults.")

    # Status page section ("statusPage" is the older key)
    raw_page = _pick(raw, "statuspage", "statusPage", default={})
    if not isinstance(raw_page, dict):
        raise ConfigError("statuspage must be a mapping")
    components = _pick(raw_page, "components", default={})
    if not isinstance(components, dict):
        raise ConfigError("statuspage.components must map service names to component ids")

    page = StatusPageConfig(
        url=str(_pick(raw_page, "url", default=StatusPageConfig.url)),
        page_id=str(_pick(raw_page, "page_id", "PAGE_ID", default="")),
        api_key=str(_pick(raw_page, "api_key", "API_KEY", default="")),
        footer_message=str(_pick(raw_page, "footer_message", "footerMessage", default="")),
        components={str(k): str(v) for k, v in components.items()},
    )

    if env.get("STATUSPAGE_API_KEY"):
        page.api_key = env["STATUSPAGE_API_KEY"]
    if env.get("STATUSPAGE_PAGE_ID"):
        page.page_id = env["STATUSPAGE_PAGE_ID"]

    # Global settings
    raw_settings = raw.get("settings") or {}
    if not isinstance(raw_settings, dict):
        raise ConfigError("settings must be a mapping")

    try:
        request_timeout = float(raw_settings.get("request_timeout", SyncSettings.request_timeout))
        port = int(env.get("PORT") or raw_settings.get("port", SyncSettings.port))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid numeric setting: {exc}") from exc

    settings = SyncSettings(
        log_level=str(raw_settings.get("log_level", "INFO")).upper(),
        database_path=str(raw_settings.get("database_path", SyncSettings.database_path)),
        request_timeout=request_timeout,
        reopen_resolved=_as_bool(raw_settings.get("reopen_resolved", False)),
        port=port,
    )

    return page, settings
