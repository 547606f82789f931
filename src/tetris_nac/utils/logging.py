# src/tetris_nac/utils/logging.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

_PLAIN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _console_handler(use_rich: bool) -> logging.Handler:
    if not use_rich:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        return handler

    from rich.logging import RichHandler

    handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logger(
    *,
    name: str,
    use_rich: bool = True,
    level: str = "info",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Console logger, rich or plain. With `log_file` the same records are also
    appended to that file in the plain format, so a run directory keeps its
    training log next to the artifacts.
    """
    logger = logging.getLogger(str(name))
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    logger.addHandler(_console_handler(bool(use_rich)))

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        logger.addHandler(fh)

    return logger


__all__ = ["setup_logger"]
