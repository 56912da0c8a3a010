"""Configuration manager for adolinks.

This module provides the ConfigManager class for loading, saving, and
managing configuration values with a cascading hierarchy:

    1. Environment Variables (highest priority)
    2. Local Config (.adolinks in project/parent directories)
    3. Global Config (~/.adolinks-config)
    4. Built-in Defaults (lowest priority)

Tenant overrides are ordinary keys of the form
``ADO_OVERRIDE_<TENANT>_BASE_URL``, ``ADO_OVERRIDE_<TENANT>_PERSONAL_ACCESS_TOKEN``
and ``ADO_OVERRIDE_<TENANT>_IS_OVERRIDING`` and follow the same precedence.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Literal

from adolinks.config.settings import (
    CONFIG_FILE,
    OVERRIDE_FIELDS,
    OVERRIDE_KEY_PREFIX,
    Settings,
    normalize_tenant_id,
)
from adolinks.config.store import ConfigurationStore
from adolinks.integrations.api_client import MAX_CONCURRENCY, MIN_CONCURRENCY
from adolinks.integrations.credentials import OverrideSetting, SensitiveString, TenantOverride
from adolinks.utils.console import console, print_header, print_info
from adolinks.utils.env_utils import expand_env_vars, is_sensitive_key, mask_value
from adolinks.utils.logging import log_message

# Module-level logger
logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)=(.*)$")

_TRUE_VALUES = ("true", "1", "yes")


def find_repo_root() -> Path | None:
    """Find the git repository root by looking for .git directory.

    Returns:
        Path to repository root, or None if not in a repository
    """
    current = Path.cwd()
    while True:
        if (current / ".git").exists():
            return current

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


class ConfigManager:
    """Manages configuration loading and saving with cascading hierarchy.

    Configuration Precedence (highest to lowest):
    1. Environment Variables - CI/CD, temporary overrides
    2. Local Config (.adolinks) - Project-specific settings
    3. Global Config (~/.adolinks-config) - User defaults
    4. Built-in Defaults - Fallback values

    Security features:
    - Safe line-by-line parsing (no eval/exec)
    - Key name validation
    - Atomic file writes
    - Secure file permissions (600)
    - Token values are never logged and are masked when shown

    Attributes:
        settings: Current settings instance
        global_config_path: Path to global ~/.adolinks-config file
        local_config_path: Path to discovered local .adolinks file (after load)
    """

    LOCAL_CONFIG_NAME = ".adolinks"
    GLOBAL_CONFIG_NAME = ".adolinks-config"

    def __init__(self, global_config_path: Path | None = None) -> None:
        """Initialize the configuration manager.

        Args:
            global_config_path: Optional custom path to global config file.
                                Defaults to ~/.adolinks-config.
        """
        self.global_config_path = global_config_path or CONFIG_FILE
        self.local_config_path: Path | None = None
        self.settings = Settings()
        self._raw_values: dict[str, str] = {}
        self._config_sources: dict[str, str] = {}

    def load(self) -> Settings:
        """Load configuration from all sources with cascading precedence.

        Each call starts from clean defaults, so the method is idempotent.

        Returns:
            Settings instance with loaded values
        """
        self.settings = Settings()
        self.local_config_path = None
        self._raw_values = {}
        self._config_sources = {}

        if self.global_config_path.exists():
            log_message(f"Loading global configuration from {self.global_config_path}")
            self._load_file(self.global_config_path, source="global")

        local_path = self._find_local_config()
        if local_path:
            self.local_config_path = local_path
            log_message(f"Loading local configuration from {local_path}")
            self._load_file(local_path, source=f"local ({local_path})")

        self._load_environment()

        for key, value in self._raw_values.items():
            self._apply_value_to_settings(key, value)

        log_message(f"Configuration loaded successfully ({len(self._raw_values)} keys)")
        return self.settings

    def _find_local_config(self) -> Path | None:
        """Find local .adolinks config by traversing up from CWD.

        Stops at the first .adolinks file, at a repository root (.git) or
        at the filesystem root.
        """
        current = Path.cwd()
        while True:
            config_path = current / self.LOCAL_CONFIG_NAME
            if config_path.exists() and config_path.is_file():
                return config_path

            # Stop at repository root
            if (current / ".git").exists():
                break

            parent = current.parent
            if parent == current:  # Reached filesystem root
                break
            current = parent

        return None

    def _load_file(self, path: Path, source: str = "file") -> None:
        """Load key=value pairs from a config file.

        Args:
            path: Path to the config file
            source: Source identifier for debugging
        """
        for key, value in self._read_file_values(path).items():
            self._raw_values[key] = value
            self._config_sources[key] = source

    def _load_environment(self) -> None:
        """Override config with environment variables.

        Only known config keys and tenant override keys are read, so
        unrelated environment variables stay out of the configuration.
        """
        for key in Settings.get_config_keys():
            env_value = os.environ.get(key)
            if env_value is not None:
                self._raw_values[key] = env_value
                self._config_sources[key] = "environment"

        for key, env_value in os.environ.items():
            if key.startswith(OVERRIDE_KEY_PREFIX):
                self._raw_values[key] = env_value
                self._config_sources[key] = "environment"

    def _apply_value_to_settings(self, key: str, value: str) -> None:
        """Apply a raw config value to the settings object.

        Args:
            key: Configuration key
            value: Raw string value from file or environment
        """
        attr = self.settings.get_attribute_for_key(key)
        if attr is None:
            return  # Unknown key, ignore

        current_value = getattr(self.settings, attr)

        if isinstance(current_value, bool):
            setattr(self.settings, attr, value.strip().lower() in _TRUE_VALUES)
        elif isinstance(current_value, int):
            try:
                parsed = int(value)
            except ValueError:
                logger.warning("Ignoring non-integer value for %s", key)
                return
            if key == "ADO_MAX_CONCURRENCY" and not MIN_CONCURRENCY <= parsed <= MAX_CONCURRENCY:
                logger.warning(
                    "Ignoring %s=%s, expected a value between %s and %s",
                    key,
                    parsed,
                    MIN_CONCURRENCY,
                    MAX_CONCURRENCY,
                )
                return
            setattr(self.settings, attr, parsed)
        elif isinstance(current_value, float):
            try:
                parsed_float = float(value)
            except ValueError:
                logger.warning("Ignoring non-numeric value for %s", key)
                return
            if parsed_float <= 0:
                logger.warning("Ignoring %s=%s, expected a positive number", key, value)
                return
            setattr(self.settings, attr, parsed_float)
        else:
            if is_sensitive_key(key):
                value = expand_env_vars(value, context=key)
            setattr(self.settings, attr, value)

    def get(self, key: str, default: str = "") -> str:
        """Get a raw configuration value.

        Args:
            key: Configuration key to retrieve
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self._raw_values.get(key, default)

    def get_source(self, key: str) -> str | None:
        """Get where a configuration value came from (global, local, environment)."""
        return self._config_sources.get(key)

    def get_tenant_overrides(self) -> dict[str, TenantOverride]:
        """Parse the ADO_OVERRIDE_<TENANT>_* keys.

        Returns:
            Overrides keyed by normalized tenant id. Token values have
            ``${VAR}`` references expanded.
        """
        fields_by_tenant: dict[str, dict[str, str]] = {}
        for key, value in self._raw_values.items():
            if not key.startswith(OVERRIDE_KEY_PREFIX):
                continue
            rest = key[len(OVERRIDE_KEY_PREFIX) :]
            for field_name in OVERRIDE_FIELDS:
                suffix = f"_{field_name}"
                if rest.endswith(suffix) and len(rest) > len(suffix):
                    tenant = normalize_tenant_id(rest[: -len(suffix)])
                    fields_by_tenant.setdefault(tenant, {})[field_name] = value
                    break
            else:
                logger.warning("Ignoring unrecognized override key %s", key)

        overrides: dict[str, TenantOverride] = {}
        for tenant, fields in fields_by_tenant.items():
            token = fields.get("PERSONAL_ACCESS_TOKEN")
            if token is not None:
                token = expand_env_vars(token, context=f"{tenant} PERSONAL_ACCESS_TOKEN")
            setting = OverrideSetting(
                base_url=(fields.get("BASE_URL") or "").strip().strip("/") or None,
                personal_access_token=SensitiveString.from_optional(token),
                is_overriding=fields.get("IS_OVERRIDING", "").strip().lower() in _TRUE_VALUES,
            )
            overrides[tenant] = TenantOverride(tenant_id=tenant, settings=(setting,))
        return overrides

    def build_store(self) -> ConfigurationStore:
        """Build a read-only store from the loaded configuration."""
        return ConfigurationStore(self.settings, self.get_tenant_overrides())

    def save(
        self,
        key: str,
        value: str,
        scope: Literal["global", "local"] = "global",
        warn_on_override: bool = True,
    ) -> str | None:
        """Save a configuration value to a config file.

        Writes the value to the selected file and reloads, so ``settings``
        always holds the effective values. The saved value may not be the
        effective one when a higher-priority source sets the same key.

        Args:
            key: Configuration key (must match pattern: [a-zA-Z_][a-zA-Z0-9_]*)
            value: Configuration value to save
            scope: "global" (~/.adolinks-config) or "local" (.adolinks)
            warn_on_override: If True, returns a warning when the saved
                              value is overridden by a higher-priority source

        Returns:
            Warning message describing the override, if any

        Raises:
            ValueError: If key name or scope is invalid
        """
        if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", key):
            raise ValueError(f"Invalid config key: {key}")

        if scope not in ("global", "local"):
            raise ValueError(f"Invalid scope: {scope}. Must be 'global' or 'local'")

        if scope == "local":
            if self.local_config_path is None:
                repo_root = find_repo_root()
                base = repo_root if repo_root else Path.cwd()
                self.local_config_path = base / self.LOCAL_CONFIG_NAME
            target_path = self.local_config_path
        else:
            target_path = self.global_config_path

        existing_lines: list[str] = []
        if target_path.exists():
            existing_lines = target_path.read_text().splitlines()

        new_lines: list[str] = []
        written = False
        key_pattern = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)=")
        escaped_value = self._escape_value_for_storage(value)

        for line in existing_lines:
            match = key_pattern.match(line.strip())
            if match and match.group(1) == key:
                new_lines.append(f'{key}="{escaped_value}"')
                written = True
            else:
                new_lines.append(line)

        if not written:
            new_lines.append(f'{key}="{escaped_value}"')

        self._atomic_write_to_path(new_lines, target_path)

        if is_sensitive_key(key):
            log_message(f"Configuration saved to {scope}: {key}=<REDACTED>")
        else:
            log_message(f"Configuration saved to {scope}: {key}")

        warning = self._check_override_warning(key, scope, warn_on_override)
        self.load()
        return warning

    def _check_override_warning(
        self,
        key: str,
        scope: Literal["global", "local"],
        warn_on_override: bool,
    ) -> str | None:
        """Check if a saved value is overridden by a higher-priority source."""
        if not warn_on_override:
            return None

        env_value = os.environ.get(key)
        if env_value is not None:
            shown = mask_value(env_value) if is_sensitive_key(key) else env_value
            return (
                f"Warning: '{key}' saved to {scope} config but is overridden "
                f"by environment variable (effective value: '{shown}')"
            )

        if scope == "global" and self.local_config_path and self.local_config_path.exists():
            local_values = self._read_file_values(self.local_config_path)
            if key in local_values:
                return (
                    f"Warning: '{key}' saved to global config but is overridden "
                    f"by local config at {self.local_config_path}"
                )

        return None

    def _read_file_values(self, path: Path) -> dict[str, str]:
        """Read key=value pairs from a config file without modifying state.

        Blank lines and ``#`` comments are skipped. Double-quoted values are
        unescaped; single-quoted values are taken literally.
        """
        values: dict[str, str] = {}
        if not path.exists():
            return values

        with path.open() as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                match = _KEY_PATTERN.match(line)
                if not match:
                    continue
                key, value = match.groups()
                if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                    value = self._unescape_value(value[1:-1])
                elif len(value) >= 2 and value.startswith("'") and value.endswith("'"):
                    value = value[1:-1]
                values[key] = value
        return values

    def _atomic_write_to_path(self, lines: list[str], target_path: Path) -> None:
        """Atomically write lines to a config file with 600 permissions."""
        target_path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(dir=target_path.parent, prefix=".adolinks-config-")
        try:
            with os.fdopen(fd, "w") as f:
                f.write("\n".join(lines))
                if lines:
                    f.write("\n")

            os.chmod(temp_path, 0o600)
            Path(temp_path).replace(target_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    @staticmethod
    def _escape_value_for_storage(value: str) -> str:
        # Backslashes first, then quotes
        return value.replace("\\", "\\\\").replace('"', '\\"')

    @staticmethod
    def _unescape_value(value: str) -> str:
        return value.replace("\\\\", "\\").replace('\\"', '"')

    def show(self) -> None:
        """Display current configuration using Rich formatting.

        Tokens are shown masked.
        """
        print_header("Current Configuration")

        print_info(f"Global config: {self.global_config_path}")
        if self.local_config_path:
            print_info(f"Local config:  {self.local_config_path}")
        else:
            print_info("Local config:  (not found)")
        console.print()

        s = self.settings
        token = mask_value(s.personal_access_token) if s.personal_access_token else "(not set)"

        console.print("  [bold]Azure DevOps:[/bold]")
        console.print(f"    Enabled: {s.enabled}")
        console.print(f"    Base URL: {s.base_url or '(not set)'}", highlight=False)
        console.print(f"    Personal Access Token: {token}", highlight=False)
        console.print(
            f"    Release Note Prefix: {s.release_note_prefix or '(not set)'}",
            markup=False,
            highlight=False,
        )
        console.print()

        console.print("  [bold]Requests:[/bold]")
        console.print(f"    Max Concurrency: {s.max_concurrency}")
        console.print(f"    Timeout (seconds): {s.timeout_seconds}")
        console.print()

        overrides = self.get_tenant_overrides()
        if overrides:
            self._show_tenant_overrides(overrides)

    def _show_tenant_overrides(self, overrides: dict[str, TenantOverride]) -> None:
        from rich.table import Table

        table = Table(title=None, show_header=True, header_style="bold")
        table.add_column("Tenant", style="cyan")
        table.add_column("Base URL")
        table.add_column("Token")
        table.add_column("Overriding")

        for tenant, tenant_override in sorted(overrides.items()):
            for setting in tenant_override.settings:
                table.add_row(
                    tenant,
                    setting.base_url or "(not set)",
                    str(setting.personal_access_token) if setting.personal_access_token else "(not set)",
                    "yes" if setting.is_overriding else "no",
                )

        console.print("  [bold]Tenant Overrides:[/bold]")
        console.print(table)
        console.print()


__all__ = [
    "ConfigManager",
    "find_repo_root",
]
