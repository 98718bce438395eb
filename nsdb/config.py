"""Database configuration.

`Config.path` selects the persistence mode: an empty string keeps the data in
memory only, anything else names the snapshot file. Configuration can also
be read from a YAML file:

    path: data/app.db
    serializer: pickle
    log_level: info      # read by configure_logging, ignored here
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    # Empty string: in-memory only. Otherwise the snapshot file path.
    path: str = ""
    serializer: str = "pickle"
    # Only used by the "encrypted" serializer.
    password: Optional[str] = None
    key: Optional[bytes] = None

    @property
    def in_memory(self) -> bool:
        return not self.path


DEFAULT_CONFIG = Config()


def load_config(config_path: str | Path) -> Config:
    """Read a `Config` from a YAML mapping.

    A missing file yields `DEFAULT_CONFIG`. Keys that are not `Config`
    fields are ignored so the same file can carry unrelated settings such as
    `log_level`.
    """
    cfg_path = Path(config_path)
    if not cfg_path.exists():
        logger.debug("No config file at %s, using defaults", cfg_path)
        return DEFAULT_CONFIG
    with cfg_path.open('r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config file {cfg_path} must contain a mapping, got {type(raw).__name__}")
    known = {f.name for f in fields(Config)}
    values = {k: v for k, v in raw.items() if k in known}
    if values.get('path') is None:
        values['path'] = ""
    else:
        values['path'] = str(values['path'])
    if isinstance(values.get('key'), str):
        values['key'] = values['key'].encode('ascii')
    return Config(**values)
