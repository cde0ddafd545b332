"""
Logging for the archetype pipeline (validation, compilation, template runs).

Engine modules log through children of the "archetype.gen" logger:

    from archetype_engine.gen_logging import get_logger
    logger = get_logger(__name__)

The template runner wraps each generator in `generator_scope(name)`. Lines
logged inside it are tagged with that generator's name, so a verbose run
reads as one block per generator and a warning names the generator that
raised it. Verbose runs also prefix the seconds elapsed since logging was
configured.
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

_LOGGER_NAME = "archetype.gen"

_current_generator: ContextVar[Optional[str]] = ContextVar("archetype_generator", default=None)


def get_logger(name: str = None) -> logging.Logger:
    """
    Return a child logger under the archetype.gen hierarchy.

    Args:
        name: Module __name__, or None for the root archetype.gen logger.
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "archetype_engine.template.runner" -> "archetype.gen.runner"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


@contextmanager
def generator_scope(name: str):
    """Tag every line logged inside the block with the running generator's name."""
    token = _current_generator.set(name)
    try:
        yield
    finally:
        _current_generator.reset(token)


def current_generator() -> Optional[str]:
    return _current_generator.get()


class GenerationFormatter(logging.Formatter):
    """
    Formats pipeline records for the terminal.

        sqlalchemy-models | model Post -> posts
        [WARNING] sqlalchemy-models | No database configured; ...
          0.014s service-layer | services/post.py (database)    (timed)

    Records logged outside a generator (mode, summary lines) keep their own
    layout.
    """

    def __init__(self, timed: bool = False):
        super().__init__()
        self.timed = timed
        self.started = time.time()

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        parts = []
        if self.timed:
            parts.append(f"{record.created - self.started:7.3f}s")
        if record.levelno >= logging.WARNING:
            parts.append(f"[{record.levelname}]")
        generator = current_generator()
        if generator is not None:
            parts.append(f"{generator} |")
            message = message.strip()
        parts.append(message)
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_gen_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the archetype.gen logger hierarchy.

    Levels:
        --verbose / -v  -> DEBUG   (every generator and file, timed)
        (default)       -> INFO    (mode, generator names, summary lines)
        --quiet / -q    -> WARNING (warnings and errors only)
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False

    # calling again reconfigures the existing handler; rebind to the current
    # stderr in case a test runner swapped it
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
            handler.setFormatter(GenerationFormatter(timed=verbose))
            if isinstance(handler, logging.StreamHandler):
                handler.stream = sys.stderr
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(GenerationFormatter(timed=verbose))
    root_logger.addHandler(handler)
