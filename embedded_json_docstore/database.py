from __future__ import annotations
import asyncio
import contextlib
import logging
import weakref
from typing import Any, AsyncContextManager, Dict, List, Mapping, MutableMapping, Optional, Tuple, Union
from .errors import CollectionNotFoundError, DocStoreError, PersistenceError, ValidationError
from .progress import Progress, ProgressCallback
from .query import iter_matches, match_all
from .response import Response, get_response
from .signature import FIND, ID_FIELD, INVALID_SIGNATURE_MSG, SET
from .signature import update_signature as _update_signature
from .signature import validate_update_signature as _validate_update_signature
from .storage import JSON_EXT, FileStorage
from .utils import is_empty, new_identifier

log = logging.getLogger(__name__)

DEFAULT_OPTIONS: Dict[str, Any] = {
    "extension": JSON_EXT,
    "fsync": True,
    "indent": None,
    "ensure_ascii": False,
    "lock_collections": True,
    "root_mode": 0o777,
}

INSERT_ID_MSG = "Cannot set _id value it is system generated value"
FILTER_TYPE_MSG = "Filter must be an object mapping field names to values"
DOCUMENT_TYPE_MSG = "Document must be an object"


class Database:
    """
    Handle on a directory of JSON array collections.

    Construction creates the root directory when it is missing. Every other
    operation is a coroutine returning a Response; blocking file work runs in
    a worker thread. Mutations load the whole collection once, change it in
    memory and replace the file.
    """
    def __init__(
        self,
        path: str,
        *,
        on_progress: Optional[ProgressCallback] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        opts = dict(DEFAULT_OPTIONS)
        if options:
            unknown = set(options) - set(DEFAULT_OPTIONS)
            if unknown:
                raise ValueError(f"unknown database options: {', '.join(sorted(unknown))}")
            opts.update(options)
        self.path = path
        self._options = opts
        self._fs = FileStorage(
            path,
            extension=opts["extension"],
            fsync=opts["fsync"],
            indent=opts["indent"],
            ensure_ascii=opts["ensure_ascii"],
        )
        self._progress = Progress(on_progress)
        # asyncio.Lock binds to the loop it first waits on, so locks are kept per loop
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Dict[str, asyncio.Lock]]" = (
            weakref.WeakKeyDictionary()
        )
        self._init_db()

    def _init_db(self) -> None:
        try:
            created = self._fs.ensure_root(self._options["root_mode"])
        except OSError as exc:
            raise DocStoreError(f"Error initialising DB at {self.path}") from exc
        if created:
            log.info("created database root %s", self.path)

    # ----- Paths & identity -----

    @property
    def directory(self) -> str:
        return self._fs.directory

    @property
    def directory_options(self) -> Dict[str, Any]:
        return {"recursive": True, "mode": 0o700}

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def collection_path(self, name: str) -> str:
        return self._fs.collection_path(name)

    @staticmethod
    def new_identifier() -> str:
        return new_identifier()

    @staticmethod
    def update_signature() -> Dict[str, Dict[str, Any]]:
        return _update_signature()

    @staticmethod
    def validate_update_signature(update: Any) -> Union[bool, Response]:
        return _validate_update_signature(update)

    # ----- Directory lifecycle -----

    async def is_exists(self, path: str) -> bool:
        found = await asyncio.to_thread(self._fs.exists, path)
        log.debug("exists(%s) -> %s", path, found)
        return found

    async def create_directory(self, name: str, options: Optional[Dict[str, Any]] = None) -> Response:
        directory = self.directory + name
        if await asyncio.to_thread(self._fs.exists, directory):
            return get_response(False, "Directory Exists")
        opts = options or {}
        try:
            await asyncio.to_thread(
                self._fs.make_directory,
                directory,
                recursive=bool(opts.get("recursive", False)),
                mode=opts.get("mode", 0o777),
            )
        except OSError as exc:
            return get_response(False, str(exc))
        return get_response(True, "Directory created")

    async def remove_database(self, name: Optional[str] = None) -> Response:
        target = self.path if name is None else name
        try:
            await asyncio.to_thread(self._fs.remove_tree, target)
        except OSError as exc:
            return get_response(False, str(exc))
        log.info("removed database %s", target)
        return get_response(True, "DB Removed")

    # ----- Collections -----

    async def find(
        self,
        name: str,
        filter: Optional[Mapping[str, Any]] = None,
        want_indices: bool = False,
    ) -> Response:
        """
        Documents of ``name`` matching ``filter`` (equality, AND). No filter or
        an empty one returns the whole collection and ignores want_indices.
        With want_indices the payload is a list of {position: document}.
        """
        try:
            documents = await self._load(name)
        except CollectionNotFoundError as exc:
            return get_response(False, str(exc))
        if filter is None or is_empty(filter):
            return get_response(True, documents)
        try:
            return get_response(True, match_all(documents, filter, want_indices))
        except ValidationError as exc:
            return get_response(False, str(exc))

    async def insert(self, name: str, document: MutableMapping[str, Any]) -> Response:
        """
        Append ``document`` with a fresh _id. A missing collection is created.
        On success the _id is also written back into ``document``.
        """
        if not isinstance(document, MutableMapping):
            return get_response(False, DOCUMENT_TYPE_MSG)
        if ID_FIELD in document:
            return get_response(False, INSERT_ID_MSG)
        rec_id = self.new_identifier()
        async with self._collection_lock(name):
            self._progress.start("insert", name)
            try:
                documents = await self._load(name)
            except CollectionNotFoundError:
                documents = []
            stored = dict(document)
            stored[ID_FIELD] = rec_id
            documents.append(stored)
            self._progress.persist("insert", name)
            try:
                await self._persist(name, documents)
            except PersistenceError as exc:
                log.warning("insert into %s failed: %s", name, exc)
                return get_response(False, f"Error inserting data\n{exc}")
            self._progress.done("insert", name)
        document[ID_FIELD] = rec_id
        return get_response(True, "Data inserted")

    async def update(self, name: str, update: Mapping[str, Any]) -> Response:
        """
        Apply ``update[$set]`` to every document matching ``update[$find]``.

        Raises CollectionNotFoundError when the collection file is missing.
        This holds for a collection that never existed too; only find reports a
        missing collection as a failure Response.
        """
        valid = self.validate_update_signature(update)
        if isinstance(valid, Response):
            return valid
        if not valid:
            return get_response(False, INVALID_SIGNATURE_MSG)
        flt = update.get(FIND) or {}
        changes = update.get(SET) or {}
        async with self._collection_lock(name):
            self._progress.start("update", name)
            documents, positions = await self._snapshot(name, flt)
            for index in positions:
                documents[index].update(changes)
            self._progress.persist("update", f"{name}: {len(positions)} matched")
            try:
                await self._persist(name, documents)
            except PersistenceError as exc:
                log.warning("update of %s failed: %s", name, exc)
                return get_response(False, f"Error while updating data\n{exc}")
            self._progress.done("update", name)
        return get_response(True, "Data Updated")

    async def delete(self, name: str, filter: Optional[Mapping[str, Any]] = None) -> Response:
        """
        Remove documents matching ``filter``. No filter, or an empty one,
        removes every document (unlike find, where empty means unfiltered
        and update, where it matches nothing).

        Raises CollectionNotFoundError when the collection file is missing.
        """
        if filter is None:
            filter = {}
        if not isinstance(filter, Mapping):
            return get_response(False, FILTER_TYPE_MSG)
        async with self._collection_lock(name):
            self._progress.start("delete", name)
            if is_empty(filter):
                documents = await self._load(name)
                remaining: List[Dict[str, Any]] = []
            else:
                documents, positions = await self._snapshot(name, filter)
                doomed = set(positions)
                remaining = [doc for index, doc in enumerate(documents) if index not in doomed]
            removed = len(documents) - len(remaining)
            self._progress.persist("delete", f"{name}: {removed} removed")
            try:
                await self._persist(name, remaining)
            except PersistenceError as exc:
                log.warning("delete from %s failed: %s", name, exc)
                return get_response(False, f"Error while deleting data\n{exc}")
            self._progress.done("delete", name)
        return get_response(True, "Removed")

    # ----- Internals -----

    async def _load(self, name: str) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._fs.read_documents, name)

    async def _snapshot(self, name: str, flt: Mapping[str, Any]) -> Tuple[List[Dict[str, Any]], List[int]]:
        # One read gives both the array and the positions into it
        documents = await self._load(name)
        return documents, [index for index, _ in iter_matches(documents, flt)]

    async def _persist(self, name: str, documents: List[Dict[str, Any]]) -> None:
        await asyncio.to_thread(self._fs.write_documents, name, documents)

    def _collection_lock(self, name: str) -> AsyncContextManager[Any]:
        if not self._options["lock_collections"]:
            return contextlib.nullcontext()
        loop = asyncio.get_running_loop()
        locks = self._locks.get(loop)
        if locks is None:
            locks = self._locks[loop] = {}
        lock = locks.get(name)
        if lock is None:
            lock = locks[name] = asyncio.Lock()
        return lock
