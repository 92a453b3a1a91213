"""Upload configuration.

Defaults are resolved relative to the current working directory:
    .env              - optional CSV2SHEETS_* overrides
    credentials.json  - Google OAuth client credentials
    token.json        - cached OAuth token
    file.csv          - data to upload

Nothing is read on import. Call `UploadSettings.from_env()` to build
settings from the environment (and an optional .env file).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

ENV_FILE = Path(".env")
DEFAULT_CREDENTIALS = Path("credentials.json")
DEFAULT_TOKEN = Path("token.json")
DEFAULT_CSV = Path("file.csv")
DEFAULT_TITLE = "Summary"
DEFAULT_RANGE = "A1"
DEFAULT_VALUE_INPUT_OPTION = "RAW"
DEFAULT_SCOPES = ("sheets",)

ENV_PREFIX = "CSV2SHEETS_"


def load_env_file(env_path: Path, environ: dict[str, str] | None = None) -> dict[str, str]:
    """Load environment variables from a file.

    Args:
        env_path: Path to .env file.
        environ: Mapping to populate. Defaults to os.environ.

    Returns:
        Dictionary of loaded variables.
    """
    target = os.environ if environ is None else environ
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            # Real environment wins over .env
            if key and key not in target:
                target[key] = value
                loaded[key] = value

    return loaded


@dataclass
class UploadSettings:
    """Everything one upload run needs."""

    credentials_path: Path = DEFAULT_CREDENTIALS
    token_path: Path = DEFAULT_TOKEN
    csv_path: Path = DEFAULT_CSV
    title: str = DEFAULT_TITLE
    target_range: str = DEFAULT_RANGE
    value_input_option: str = DEFAULT_VALUE_INPUT_OPTION
    scopes: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        env_file: Path | None = ENV_FILE,
    ) -> UploadSettings:
        """Build settings from CSV2SHEETS_* variables.

        Args:
            environ: Environment mapping. Defaults to a copy of os.environ.
            env_file: Optional .env file merged under `environ`. Pass None to skip.

        Returns:
            UploadSettings with defaults for anything unset.
        """
        env = dict(os.environ if environ is None else environ)
        if env_file is not None:
            load_env_file(Path(env_file), env)

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value or None

        settings = cls()
        if path := get("CREDENTIALS"):
            settings.credentials_path = Path(path)
        if path := get("TOKEN"):
            settings.token_path = Path(path)
        if path := get("CSV"):
            settings.csv_path = Path(path)
        if title := get("TITLE"):
            settings.title = title
        if target_range := get("RANGE"):
            settings.target_range = target_range
        return settings

    def status(self) -> dict:
        """Report which of the configured files exist."""
        paths = {
            "credentials": self.credentials_path,
            "token": self.token_path,
            "csv": self.csv_path,
        }
        return {name: {"path": str(p), "exists": p.exists()} for name, p in paths.items()}
