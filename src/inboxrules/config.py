"""Summary: Application configuration for InboxRules.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from dataclasses import dataclass

STORE_BACKENDS = ("json", "sqlite", "memory")


@dataclass(frozen=True)
class EngineConfig:
    """Summary: Holds configuration values for storage, delivery, and the API.

    Importance: Ensures all entry points derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    store_backend: str
    store_path: str
    seed_default_rules: bool
    notifications_enabled: bool
    log_level: str
    api_key: str

    @staticmethod
    def from_env(defaults_path: Path | None = None) -> "EngineConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(defaults_path or Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        store_backend = os.getenv("INBOXRULES_STORE_BACKEND", defaults["store_backend"]).lower()
        if store_backend not in STORE_BACKENDS:
            raise ValueError(f"Unknown store backend: {store_backend}")
        return EngineConfig(
            store_backend=store_backend,
            store_path=os.getenv("INBOXRULES_STORE_PATH", defaults["store_path"]),
            seed_default_rules=parse_bool(
                os.getenv("INBOXRULES_SEED_DEFAULT_RULES", defaults["seed_default_rules"])
            ),
            notifications_enabled=parse_bool(
                os.getenv("INBOXRULES_NOTIFICATIONS_ENABLED", defaults["notifications_enabled"])
            ),
            log_level=os.getenv("INBOXRULES_LOG_LEVEL", defaults["log_level"]).upper(),
            api_key=os.getenv("INBOXRULES_API_KEY", defaults["api_key"]),
        )


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON.

    Importance: Ensures all variables exist in a single config file.
    Alternatives: Inline defaults in the EngineConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps machine-specific paths out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
