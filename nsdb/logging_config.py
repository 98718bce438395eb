from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional


def configure_logging(config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for an application embedding nsdb.

    Reads `log_level` from the YAML config file when it exists and falls back
    to WARNING otherwise. Returns the `nsdb` package logger for the caller.
    The library never calls this itself; it only creates module loggers.
    """
    default_level = logging.WARNING

    cfg_path = Path(config_path) if config_path else Path('nsdb.yml')
    if cfg_path.exists():
        try:
            with cfg_path.open('r', encoding='utf-8') as _f:
                _cfg = yaml.safe_load(_f) or {}
            _lvl = _cfg.get('log_level') if isinstance(_cfg, dict) else None
            if isinstance(_lvl, str):
                _numeric = getattr(logging, _lvl.upper(), None)
                if isinstance(_numeric, int):
                    default_level = _numeric
        except (OSError, yaml.YAMLError):
            # If config parse fails, fall back to default level
            logging.exception('Failed to read %s for logging setup', cfg_path)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=default_level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger('nsdb')
    logger.info("Log level set to: %s", logging.getLevelName(default_level))
    return logger
