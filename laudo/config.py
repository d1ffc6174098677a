"""Runtime settings.

Values come from the process environment, optionally seeded from a ``.env``
file, and are passed explicitly to every operation:

- ``ROOT_PATH``: source tree holding the process folders
- ``TARGET_PATH``: destination base for year-partitioned archives
- ``HOST`` / ``PORT``: where ``laudo serve`` listens
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .constants import DEFAULT_HOST, DEFAULT_PORT


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    source_root: Path
    destination_base: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def with_overrides(
        self,
        *,
        source_root: Optional[str] = None,
        destination_base: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ) -> "Settings":
        changes = {}
        if source_root:
            changes["source_root"] = Path(source_root)
        if destination_base:
            changes["destination_base"] = Path(destination_base)
        if host:
            changes["host"] = host
        if port is not None:
            changes["port"] = int(port)
        return replace(self, **changes) if changes else self


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env_file: Explicit dotenv file. When omitted, ``./.env`` is used if present.
            Variables already set in the environment take precedence.
    """
    env_path = Path(env_file) if env_file else Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        logger.info("Loaded configuration from %s", env_path)
    elif env_file:
        raise FileNotFoundError(f"Environment file not found: {env_file}")
    else:
        logger.debug(".env file not found, using system environment variables")

    port_str = os.environ.get("PORT", str(DEFAULT_PORT))
    try:
        port = int(port_str)
    except ValueError:
        logger.warning("Invalid PORT value %r, using %d", port_str, DEFAULT_PORT)
        port = DEFAULT_PORT

    root = os.environ.get("ROOT_PATH")
    target = os.environ.get("TARGET_PATH")
    if not root:
        logger.info("ROOT_PATH not set - using the current directory as source root")
    if not target:
        logger.info("TARGET_PATH not set - archives will be written below ./laudos")

    return Settings(
        source_root=Path(root or "."),
        destination_base=Path(target or "laudos"),
        host=os.environ.get("HOST", DEFAULT_HOST),
        port=port,
    )
