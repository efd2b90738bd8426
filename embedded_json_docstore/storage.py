from __future__ import annotations
import json
import logging
import os
import shutil
import tempfile
from typing import Any, Dict, List
from .errors import CollectionNotFoundError, IOCorruptionError, PersistenceError
from .utils import dumps

log = logging.getLogger(__name__)

JSON_EXT = ".json"


class FileStorage:
    """
    Whole-file I/O for the collections of one database root.

    Every collection is a single <root>/<name><ext> file holding a JSON array.
    Reads decode the full array; writes replace the full file through a temp
    file in the same directory, so readers see either the old or the new array.
    All methods are blocking.
    """
    def __init__(
        self,
        root: str,
        *,
        extension: str = JSON_EXT,
        fsync: bool = True,
        indent: int | None = None,
        ensure_ascii: bool = False,
    ) -> None:
        self.root = root
        self.separator = os.sep
        self.extension = extension
        self.fsync = fsync
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    @property
    def directory(self) -> str:
        return self.root + self.separator

    def collection_path(self, name: str) -> str:
        return self.directory + name + self.extension

    # ----- Directories -----

    def ensure_root(self, mode: int = 0o777) -> bool:
        """
        Create the root directory if absent. Returns True when it was created.
        """
        if os.path.lexists(self.root):
            return False
        try:
            os.makedirs(self.root, mode=mode)
        except FileExistsError:
            return False
        return True

    @staticmethod
    def exists(path: str) -> bool:
        return os.path.lexists(path)

    @staticmethod
    def make_directory(path: str, *, recursive: bool = False, mode: int = 0o777) -> None:
        if recursive:
            os.makedirs(path, mode=mode, exist_ok=True)
        else:
            os.mkdir(path, mode)

    @staticmethod
    def remove_tree(path: str) -> None:
        shutil.rmtree(path)

    # ----- Collections -----

    def read_documents(self, name: str) -> List[Dict[str, Any]]:
        path = self.collection_path(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError as exc:
            raise CollectionNotFoundError(name) from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise IOCorruptionError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc
        if not isinstance(data, list):
            raise IOCorruptionError(f"{path}: expected a JSON array, got {type(data).__name__}")
        log.debug("loaded %d documents from %s", len(data), path)
        return data

    def write_documents(self, name: str, documents: List[Dict[str, Any]]) -> None:
        path = self.collection_path(name)
        payload = dumps(documents, indent=self.indent, ensure_ascii=self.ensure_ascii)
        try:
            tmp_path = self._write_temp(path, payload)
            self.replace_file(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(f"{path}: {exc}") from exc
        log.debug("persisted %d documents to %s", len(documents), path)

    def _write_temp(self, path: str, payload: str) -> str:
        # Same directory as the target so os.replace stays on one filesystem
        fd, tmp_path = tempfile.mkstemp(
            prefix="." + os.path.basename(path) + ".",
            suffix=".tmp",
            dir=os.path.dirname(path) or ".",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError:
            self._discard(tmp_path)
            raise
        return tmp_path

    def replace_file(self, tmp_path: str, path: str) -> None:
        try:
            os.replace(tmp_path, path)
        except OSError:
            self._discard(tmp_path)
            raise
        if self.fsync:
            self._fsync_dir(os.path.dirname(path) or ".")

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass

    @staticmethod
    def _fsync_dir(dirpath: str) -> None:
        # Directory handles cannot be opened on Windows
        if os.name == "nt":
            return
        fd = os.open(dirpath, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
