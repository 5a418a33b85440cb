"""Logging utilities."""
from __future__ import annotations

import logging.config
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"
_FALLBACK_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(config_path: Path | None = None, *, level: str = "INFO") -> None:
    """Apply the YAML logging config with the ``chargeview`` logger at ``level``.

    Falls back to a plain console setup when the file is missing.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        logging.basicConfig(level=level.upper(), format=_FALLBACK_FORMAT)
        logging.getLogger("chargeview").setLevel(level.upper())
        return

    with path.open("r", encoding="utf-8") as config_file:
        config = yaml.safe_load(config_file)
    config.setdefault("loggers", {}).setdefault("chargeview", {})["level"] = level.upper()
    logging.config.dictConfig(config)
