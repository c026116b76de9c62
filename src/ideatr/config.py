"""Configuration loading from environment variables and ideatr.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "ideatr.toml"
_DEFAULT_DOCUMENTS_DIR = "Ideas"


@dataclass
class VaultConfig:
    """Where documents live."""

    root: Path = field(default_factory=Path.cwd)
    documents_dir: str = _DEFAULT_DOCUMENTS_DIR


@dataclass
class IdeatrConfig:
    """Top-level ideatr configuration."""

    vault: VaultConfig = field(default_factory=VaultConfig)
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> IdeatrConfig:
    """Load configuration from environment variables and optional ideatr.toml.

    Priority: environment variables > ideatr.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.ideatr/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".ideatr" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    vault_data = file_data.get("vault", {})

    root = os.getenv("IDEATR_VAULT", vault_data.get("root"))
    return IdeatrConfig(
        vault=VaultConfig(
            root=Path(root).expanduser() if root else Path.cwd(),
            documents_dir=os.getenv(
                "IDEATR_DOCUMENTS_DIR", vault_data.get("documents_dir", _DEFAULT_DOCUMENTS_DIR)
            ),
        ),
        log_level=os.getenv("IDEATR_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
