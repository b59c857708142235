"""Settings resolution with profile support, and the defaults resolver used by the client."""

import os
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from pathlib import Path

import tomlkit
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from cats_jira.faults import ConfigFault

CONFIG_PATH = Path.home() / ".config" / "cats-jira" / "config.toml"


class CatsSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CATS_JIRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None

    # Connection
    url: str | None = None
    user: str | None = None
    password: SecretStr | None = None
    timeout: float = 30.0  # seconds, per HTTP request

    # Issue defaults
    project: str | None = None
    issue_type: str | None = "Bug"
    summary: str | None = None
    description: str | None = None
    repository: str | None = None
    branch: str | None = None
    commit: str | None = None
    role: str | None = "assignee"  # JQL field compared against currentUser()
    transition: str | None = "Close Issue"


class Key(str, Enum):
    url = "url"
    user = "user"
    password = "password"
    project = "project"
    issue_type = "issue_type"
    summary = "summary"
    description = "description"
    repository = "repository"
    branch = "branch"
    commit = "commit"
    role = "role"
    transition = "transition"


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/cats-jira/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> CatsSettings:
    """Resolve the active profile and return a fully populated CatsSettings.

    Precedence for the profile name (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. CATS_JIRA_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/cats-jira/config.toml
    4. First profile defined in ~/.config/cats-jira/config.toml

    Profile values are defaults; CATS_JIRA_* env vars and .env override them.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("CATS_JIRA_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            raise ConfigFault(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")

    return CatsSettings(**profile_defaults)


class Defaults:
    """Fills in values the caller left out from the configured settings."""

    def __init__(self, settings: CatsSettings) -> None:
        self._settings = settings

    def configured(self, key: Key) -> str | None:
        value = getattr(self._settings, key.value)
        if isinstance(value, SecretStr):
            return value.get_secret_value()
        return value

    def _missing(self, key: Key) -> ConfigFault:
        return ConfigFault(
            f"No {key.value} given and no default configured. Set CATS_JIRA_{key.value.upper()} "
            f"or {key.value} in your profile in {CONFIG_PATH}"
        )

    def with_default(self, key: Key, value: str | None = None) -> str:
        if value is not None:
            return value
        configured = self.configured(key)
        if configured is None:
            raise self._missing(key)
        return configured

    def credential(self, key: Key, value: str | None = None, allow_anonymous: bool = False) -> str | None:
        """Like with_default, but a missing value is acceptable for anonymous access."""
        if value is not None:
            return value
        configured = self.configured(key)
        if configured is None and not allow_anonymous:
            raise self._missing(key)
        return configured

    def optional(self, key: Key, value: str | None = None) -> str:
        """Blank-aware lookup for optional text; returns "" when nothing is set."""
        if value and value.strip():
            return value
        configured = self.configured(key)
        if configured and configured.strip():
            return configured
        return ""
