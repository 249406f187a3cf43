"""JSON file persistence."""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from monitoring import PersistenceError


class JsonFileStore:
    """A single JSON document on disk, replaced wholesale on every save."""

    def __init__(self, path: Path, default: Any = None):
        self.path = Path(path)
        self.default = default
        self.logger = logging.getLogger(__name__)

    def load(self) -> Any:
        """Read the document; a missing file yields a copy of the default."""
        if not self.path.exists():
            self.logger.info(f"{self.path.name} not found, starting empty")
            return copy.deepcopy(self.default)

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(
                f"Failed to read {self.path}: {e}",
                details={'path': str(self.path)},
                cause=e
            )

    def save(self, data: Any) -> None:
        """Write pretty-printed JSON via a temp file and atomic rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=self.path.parent,
                prefix=f'.{self.path.name}.', suffix='.tmp', delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(data, tmp, ensure_ascii=False, indent=2)
                tmp.write('\n')
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            self.logger.debug(f"Wrote {self.path}")
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(
                f"Failed to write {self.path}: {e}",
                details={'path': str(self.path)},
                cause=e
            )
