"""Thread-safe query surface over a merged configuration document.

Subsystems pull their own subtree out of the document and validate it into a
typed structure::

    class ServiceConfig(BaseModel):
        name: str
        port: int = 8080

    service = container.populate("service", ServiceConfig)

Field mapping follows pydantic: YAML keys match field names, or the field's
``alias`` when one is set. Anything ``pydantic.TypeAdapter`` accepts can be a
target (models, dataclasses, TypedDicts, ``dict[str, int]``, ...).
"""

import copy
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from cfx.config.errors import NoConfigLoadedError, PopulateError

T = TypeVar("T")

_MISSING = object()


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _split_key(key: str) -> list[str]:
    return [part for part in key.split(".") if part] if key else []


def _lookup(document: Mapping[str, Any], key: str, *, strict: bool = False) -> Any:
    """Walk a dotted key, returning ``_MISSING`` if any segment is absent.

    With ``strict``, stepping into a scalar or list raises instead.
    """
    node: Any = document
    for part in _split_key(key):
        if not isinstance(node, Mapping):
            if not strict:
                return _MISSING
            raise PopulateError(
                f"Cannot read '{key}': '{part}' is below a {type(node).__name__} value",
                key=key,
            )
        if part not in node:
            return _MISSING
        node = node[part]
    return node


class ConfigContainer:
    """Read-only view over a merged YAML document.

    The document is held behind a single reference guarded by a
    reader/writer lock. It is installed once at load time and never mutated
    in place, so any number of threads may query it concurrently.
    """

    def __init__(self, document: Mapping[str, Any] | None = None) -> None:
        self._lock = ReadWriteLock()
        self._document: Mapping[str, Any] | None = None
        if document is not None:
            self._replace(document)

    def _replace(self, document: Mapping[str, Any]) -> None:
        with self._lock.write():
            self._document = document

    def _snapshot(self) -> Mapping[str, Any]:
        if self._document is None:
            raise NoConfigLoadedError()
        return self._document

    @property
    def loaded(self) -> bool:
        with self._lock.read():
            return self._document is not None

    def populate(self, key: str, target: type[T]) -> T:
        """Validate the subtree at ``key`` into ``target``.

        Args:
            key: Top-level or dotted key (``"service"``, ``"db.primary"``).
                ``""`` selects the whole document. A key that is not present,
                or whose value is ``null``, yields an empty mapping, so models
                with defaults keep them.
            target: Type to build, typically a pydantic model class.

        Returns:
            The populated ``target`` instance.

        Raises:
            NoConfigLoadedError: No document was ever loaded.
            PopulateError: The subtree does not fit ``target``; the pydantic
                ``ValidationError`` is chained as ``__cause__``.
        """
        with self._lock.read():
            node = _lookup(self._snapshot(), key, strict=True)
            if node is _MISSING or node is None:
                node = {}
            try:
                # Validation copies into fresh objects; the document is never handed out.
                return _adapter(target).validate_python(copy.deepcopy(node))
            except ValidationError as e:
                raise PopulateError(
                    f"Could not populate {getattr(target, '__name__', target)} "
                    f"from '{key}': {e}",
                    key=key,
                ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the raw value at ``key``, or ``default`` if absent."""
        with self._lock.read():
            node = _lookup(self._snapshot(), key)
            if node is _MISSING:
                return default
            return copy.deepcopy(node)

    def has(self, key: str) -> bool:
        """Return whether ``key`` is present in the document."""
        with self._lock.read():
            return _lookup(self._snapshot(), key) is not _MISSING
