"""Injector — a registry for shared application services.

Services are stored under a hashable key, by default the instance's class.
Supports:
- put / lazy_put / put_async / find / delete
- auto-dispose membership, released together by dispose_all()
- named scopes, released together by dispose_scope()
- tagged instances in their own (key, tag) namespace
- override() for substituting test doubles without lifecycle hooks

Objects that subclass Injectable get on_init() when they are registered and
on_dispose() when they are removed, exactly once per registration.

Every mutation is reported to the optional on_event hook and, when
enable_logs is set, logged at INFO on the "wirex.injector" logger.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Hashable, TypeVar

from wirex.injectable import Injectable

logger = logging.getLogger("wirex.injector")

T = TypeVar("T")

InjectorHook = Callable[[str, Hashable], None]

_MISSING = object()


class WirexError(Exception):
    """Base class for registry errors."""


class NotRegisteredError(WirexError, LookupError):
    """No instance or factory is registered for the requested key."""


class ConstructionError(WirexError):
    """A lazy or async factory raised while building an instance."""


def _name(key: Hashable) -> str:
    return getattr(key, "__qualname__", None) or repr(key)


def _init(instance: object) -> None:
    if isinstance(instance, Injectable):
        instance.on_init()


def _dispose(instance: object) -> None:
    if isinstance(instance, Injectable):
        instance.on_dispose()


class Injector:
    """Keyed service registry with lifecycle management."""

    def __init__(self, *, enable_logs: bool = False, on_event: InjectorHook | None = None) -> None:
        self._instances: dict[Hashable, Any] = {}
        self._factories: dict[Hashable, Callable[[], Any]] = {}
        self._auto_dispose: set[Hashable] = set()
        self._scopes: dict[str, set[Hashable]] = {}
        self._tagged: dict[tuple[Hashable, str], Any] = {}
        self.enable_logs = enable_logs
        self.on_event = on_event

    # --- Diagnostics ---

    def _emit(self, event: str, key: Hashable) -> None:
        if self.enable_logs:
            logger.info("[wirex] %s<%s>()", event, _name(key))
        if self.on_event is not None:
            try:
                self.on_event(event, key)
            except Exception:
                logger.exception("Injector event hook failed on %s<%s>", event, _name(key))

    def debug_dependencies(self) -> str:
        """Describe everything currently registered. Also logged at DEBUG."""
        lines = ["Registered instances:"]
        lines += [f" - {_name(k)} => {v!r}" for k, v in self._instances.items()]
        lines.append("Lazy factories:")
        lines += [f" - {_name(k)} => {v!r}" for k, v in self._factories.items()]
        lines.append("Tagged instances:")
        lines += [f" - {_name(k)}[{tag}] => {v!r}" for (k, tag), v in self._tagged.items()]
        lines.append("Scopes:")
        lines += [
            f" - {scope}: {', '.join(sorted(_name(k) for k in keys))}"
            for scope, keys in self._scopes.items()
        ]
        report = "\n".join(lines)
        logger.debug("%s", report)
        return report

    # --- Storage primitives ---

    @staticmethod
    def _swap(store: dict, key: Hashable, instance: object) -> None:
        """Store instance, disposing a different object it replaces."""
        old = store.get(key, _MISSING)
        if old is instance:
            return
        if old is not _MISSING:
            _dispose(old)
        store[key] = instance
        _init(instance)

    def _evict(self, key: Hashable) -> object:
        """Remove key from instances and every membership. Returns the old value."""
        self._auto_dispose.discard(key)
        for members in self._scopes.values():
            members.discard(key)
        return self._instances.pop(key, _MISSING)

    def _construct(self, key: Hashable, factory: Callable[[], T]) -> T:
        try:
            return factory()
        except Exception as exc:
            raise ConstructionError(f"Factory for {_name(key)} failed: {exc}") from exc

    # --- Core registration ---

    def put(self, instance: T, key: Hashable | None = None) -> T:
        """Register an already created instance. Returns it."""
        key = type(instance) if key is None else key
        self._swap(self._instances, key, instance)
        self._emit("put", key)
        return instance

    def lazy_put(self, factory: Callable[[], Any], key: Hashable | None = None) -> None:
        """Register a zero-argument factory, called on the first find().

        A class can be passed on its own and serves as both key and factory.
        """
        if key is None:
            if not isinstance(factory, type):
                raise TypeError("lazy_put() needs a key unless the factory is a class")
            key = factory
        self._factories[key] = factory
        self._emit("lazyPut", key)

    async def put_async(
        self, factory: Callable[[], Awaitable[T]], key: Hashable | None = None
    ) -> T:
        """Await factory, then register its result.

        The key stays unregistered until construction succeeds.
        """
        try:
            instance = await factory()
        except Exception as exc:
            label = _name(key) if key is not None else getattr(factory, "__name__", repr(factory))
            raise ConstructionError(f"Async factory for {label} failed: {exc}") from exc
        self.put(instance, key)
        self._emit("putAsync", type(instance) if key is None else key)
        return instance

    def find(self, key: Hashable) -> Any:
        """Return the instance for key, building it from its factory if needed.

        Raises NotRegisteredError if neither exists.
        """
        if key in self._instances:
            self._emit("find", key)
            return self._instances[key]
        if key in self._factories:
            instance = self._construct(key, self._factories[key])
            return self.put(instance, key)
        raise NotRegisteredError(f"No instance of {_name(key)} found.")

    def get_or_none(self, key: Hashable) -> Any | None:
        """Like find(), but returns None when nothing is registered."""
        if not self.is_registered(key):
            return None
        return self.find(key)

    def is_registered(self, key: Hashable) -> bool:
        return key in self._instances or key in self._factories

    def delete(self, key: Hashable) -> None:
        """Remove the instance and factory for key, disposing the instance."""
        instance = self._evict(key)
        self._factories.pop(key, None)
        if instance is not _MISSING:
            _dispose(instance)
        self._emit("delete", key)

    # --- Auto dispose ---

    def auto_dispose_put(self, instance: T, key: Hashable | None = None) -> T:
        """Register an instance that dispose_all() will release."""
        key = type(instance) if key is None else key
        self._swap(self._instances, key, instance)
        self._auto_dispose.add(key)
        self._emit("autoDisposePut", key)
        return instance

    def dispose_all(self) -> None:
        """Dispose every auto-dispose instance."""
        for key in list(self._auto_dispose):
            instance = self._evict(key)
            if instance is not _MISSING:
                _dispose(instance)
            self._emit("disposeAuto", key)
        self._auto_dispose.clear()

    # --- Scopes ---

    def put_scoped(self, instance: T, scope: str, key: Hashable | None = None) -> T:
        """Register an instance as a member of the named scope.

        A key belongs to at most one scope: the one it was last put into.
        """
        key = type(instance) if key is None else key
        self._swap(self._instances, key, instance)
        for members in self._scopes.values():
            members.discard(key)
        self._scopes.setdefault(scope, set()).add(key)
        self._emit("putScoped", key)
        return instance

    def dispose_scope(self, scope: str) -> None:
        """Dispose every instance in scope and forget the scope."""
        members = self._scopes.pop(scope, None)
        if members is None:
            return
        for key in list(members):
            instance = self._evict(key)
            if instance is not _MISSING:
                _dispose(instance)
            self._emit("disposeScope", key)

    def scope_members(self, scope: str) -> frozenset[Hashable]:
        return frozenset(self._scopes.get(scope, ()))

    # --- Tags ---

    def put_tagged(self, instance: T, tag: str, key: Hashable | None = None) -> T:
        """Register an instance under (key, tag), separate from untagged entries."""
        key = type(instance) if key is None else key
        self._swap(self._tagged, (key, tag), instance)
        self._emit("putTagged", key)
        return instance

    def find_tagged(self, key: Hashable, tag: str) -> Any:
        try:
            instance = self._tagged[(key, tag)]
        except KeyError:
            raise NotRegisteredError(
                f"No tagged instance of {_name(key)} with tag {tag!r}."
            ) from None
        self._emit("findTagged", key)
        return instance

    def delete_tagged(self, key: Hashable, tag: str) -> None:
        instance = self._tagged.pop((key, tag), _MISSING)
        if instance is not _MISSING:
            _dispose(instance)
        self._emit("deleteTagged", key)

    # --- Testing support ---

    def override(self, instance: object, key: Hashable | None = None) -> None:
        """Replace the stored instance for key. No lifecycle hooks run."""
        key = type(instance) if key is None else key
        self._instances[key] = instance
        self._emit("override", key)

    def reset(self) -> None:
        """Dispose every untagged instance, then clear all registrations."""
        seen: set[int] = set()
        for instance in list(self._instances.values()):
            if id(instance) in seen:
                continue
            seen.add(id(instance))
            _dispose(instance)
        self._instances.clear()
        self._factories.clear()
        self._auto_dispose.clear()
        self._scopes.clear()
        self._tagged.clear()
        self._emit("reset", object)

    def __repr__(self) -> str:
        return (
            f"Injector(instances={len(self._instances)}, factories={len(self._factories)}, "
            f"tagged={len(self._tagged)}, scopes={len(self._scopes)})"
        )


# Process-wide registry for applications that want an ambient container.
default_injector = Injector()
