from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from freebox_client_exceptions import ConfigException
from freebox_models import ApiVersion

logger = logging.getLogger(__name__)


@dataclass
class FreeboxConfig:
    """Persisted pairing: {"api": ApiVersion, "app_token": str}."""
    api: ApiVersion
    app_token: str = ""

    def is_usable(self) -> bool:
        return self.api.is_valid() and bool(self.app_token)

    @classmethod
    def from_dict(cls, data: dict) -> FreeboxConfig:
        api = data.get("api")
        return cls(
            api=ApiVersion.from_dict(api) if isinstance(api, dict) else ApiVersion(),
            app_token=str(data.get("app_token") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "api": self.api.to_dict(),
            "app_token": self.app_token,
        }


def load_config(path: str) -> Optional[FreeboxConfig]:
    """
    Read the configuration file.

    A missing, unreadable or malformed file is not an error: None is returned
    and the exporter pairs again.
    """
    if not os.path.exists(path):
        logger.info(f"Could not find the configuration file {path}")
        return None
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read the configuration file {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed configuration file {path}")
        return None
    logger.info(f"Use configuration file {path}")
    return FreeboxConfig.from_dict(data)


def save_config(path: str, config: FreeboxConfig) -> None:
    logger.info(f"Write the configuration file {path}")
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise ConfigException(f"could not write the configuration file {path}: {e}") from e
