"""File persistence collaborators used by the runner."""

from pathlib import Path
from typing import Protocol

from archetype_engine.errors import PersistenceError
from archetype_engine.gen_logging import get_logger

logger = get_logger(__name__)


class FileWriter(Protocol):
    def write(self, path: str, content: str) -> None:
        ...


class FileSystemWriter:
    """
    Write files below `base_dir`, creating parent directories as needed.

    Each successful write is recorded on `written` so a failure can report
    what already reached the disk. There are no retries.
    """

    def __init__(self, base_dir):
        self.base_dir = Path(base_dir)
        self.written = []

    def write(self, path: str, content: str) -> None:
        target = self.base_dir / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(str(target), written=self.written) from e
        self.written.append(str(target))
        logger.debug(f"    [OK] {path}")


class MemoryWriter:
    """Collect files in a dict; used by tests and by callers that post-process output."""

    def __init__(self):
        self.files = {}

    def write(self, path: str, content: str) -> None:
        self.files[path] = content
