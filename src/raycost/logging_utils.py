from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator


def make_logger(name: str = "raycost", level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


@contextmanager
def timed(logger: logging.Logger, msg: str) -> Iterator[None]:
    t0 = time.perf_counter()
    logger.info("%s ...", msg)
    ok = False
    try:
        yield
        ok = True
    finally:
        dt = time.perf_counter() - t0
        if ok:
            logger.info("%s done in %.3fs", msg, dt)
        else:
            logger.error("%s failed after %.3fs", msg, dt)
