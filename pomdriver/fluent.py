"""Fluent, strictly ordered chains over asynchronous page objects.

``start_chain(factory)`` wraps an async factory that produces a page object.
Calls made on the returned handle are queued and run one after another in
submission order; awaiting any handle drains the queue and yields the
resolved result::

    await tenants.go_to_new_tenant().type_tenant_name("Acme").submit()

Calls return the chain root again so siblings can be chained, except for
members registered as value-returning (``extract_identifier`` and friends),
which return a detached :class:`ValueHandle` over their result.

The interception surface is explicit: ``get_member(name)`` and
``invoke_member(name, *args, **kwargs)``. Attribute access and calling are
sugar over those two; names starting with ``_`` are not intercepted.
"""

from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional, Set

from .errors import MissingMemberError, NotCallableError

logger = logging.getLogger(__name__)

_VALUE_RETURNING: Set[str] = {"extract_identifier", "extract_identifier_as_int"}


def register_value_returning(*names: str) -> None:
    """Mark member names whose chained calls yield a ValueHandle."""
    _VALUE_RETURNING.update(names)


def value_returning(fn):
    """Decorator form of :func:`register_value_returning`."""
    register_value_returning(fn.__name__)
    return fn


def is_value_returning(name: str) -> bool:
    return name in _VALUE_RETURNING


def _owner_name(obj: Any) -> str:
    return type(obj).__name__


def _consume(task: asyncio.Future) -> None:
    # results are discardable: an unawaited failure must not warn at GC time
    if not task.cancelled():
        task.exception()


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ActionQueue:
    """Serialized queue of deferred operations sharing one tail.

    Each appended operation first awaits the previous one, so a failure
    re-raises in every operation behind it. The queue never recovers.
    """

    def __init__(self):
        self._tail: Optional[asyncio.Future] = None

    def append(self, work: Callable[[], Awaitable[Any]]) -> asyncio.Future:
        previous = self._tail

        async def run():
            if previous is not None:
                await asyncio.shield(previous)
            return await work()

        task = asyncio.ensure_future(run())
        task.add_done_callback(_consume)
        self._tail = task
        return task

    async def drain(self) -> None:
        """Wait until everything queued so far, and anything queued meanwhile, settled."""
        while True:
            tail = self._tail
            if tail is None:
                return
            await asyncio.shield(tail)
            if tail is self._tail:
                return

    async def settle(self) -> None:
        """Like :meth:`drain`, but a failed tail does not raise here."""
        while True:
            tail = self._tail
            if tail is None:
                return
            await asyncio.wait({tail})
            if tail is self._tail:
                return


class _Handle:
    """Attribute sugar shared by all handles."""

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_member(name)

    def get_member(self, name: str) -> "MemberHandle":
        raise NotImplementedError

    def invoke_member(self, name: str, *args, **kwargs):
        return self.get_member(name)(*args, **kwargs)


class ChainHandle(_Handle):
    """Root of a chain: an in-flight page object and its action queue."""

    def __init__(self, factory: Callable[[], Any], *, value_methods: Iterable[str] = ()):
        self._factory = factory
        self._root_task: Optional[asyncio.Future] = None
        self._queue = ActionQueue()
        self._value_methods: FrozenSet[str] = frozenset(value_methods)

    def _is_value_method(self, name: str) -> bool:
        return name in self._value_methods or is_value_returning(name)

    async def _resolve_root(self) -> Any:
        # the factory runs exactly once; every consumer shares its outcome
        if self._root_task is None:
            self._root_task = asyncio.ensure_future(_settle_factory(self._factory))
            self._root_task.add_done_callback(_consume)
        return await asyncio.shield(self._root_task)

    def get_member(self, name: str) -> "MemberHandle":
        return MemberHandle(self._queue, self._resolve_root, name, root=self)

    async def _materialize(self) -> Any:
        await self._queue.drain()
        return await self._resolve_root()

    def __await__(self):
        return self._materialize().__await__()

    def __repr__(self) -> str:
        return f"<ChainHandle factory={getattr(self._factory, '__qualname__', self._factory)!r}>"


async def _settle_factory(factory: Callable[[], Any]) -> Any:
    return await _settle(factory())


class MemberHandle(_Handle):
    """A named member of a parent that has not been resolved yet."""

    def __init__(
        self,
        queue: ActionQueue,
        get_parent: Callable[[], Awaitable[Any]],
        name: str,
        *,
        root: Optional[ChainHandle],
    ):
        self._queue = queue
        self._get_parent = get_parent
        self._name = name
        # None => detached from the page object (value side of a chain)
        self._root = root

    async def _resolve(self) -> Any:
        parent = await self._get_parent()
        value = getattr(parent, self._name, None)
        if value is None:
            raise MissingMemberError(self._name, _owner_name(parent))
        return value

    def get_member(self, name: str) -> "MemberHandle":
        return MemberHandle(self._queue, self._resolve, name, root=self._root)

    def __call__(self, *args, **kwargs):
        name = self._name
        get_parent = self._get_parent

        async def work():
            parent = await get_parent()
            fn = getattr(parent, name, None)
            if fn is None:
                raise MissingMemberError(name, _owner_name(parent))
            if not callable(fn):
                raise NotCallableError(name, _owner_name(parent))
            logger.debug("chain: %s.%s()", _owner_name(parent), name)
            return await _settle(fn(*args, **kwargs))

        task = self._queue.append(work)
        if self._root is None or self._root._is_value_method(name):
            return ValueHandle(self._queue, task)
        return self._root

    async def _materialize(self) -> Any:
        if self._root is None:
            await self._queue.settle()
        else:
            await self._queue.drain()
        return await self._resolve()

    def __await__(self):
        return self._materialize().__await__()

    def __repr__(self) -> str:
        return f"<MemberHandle {self._name!r}{'' if self._root else ' detached'}>"


class ValueHandle(_Handle):
    """Detached result of a queued call; never leads back to the chain root."""

    def __init__(self, queue: ActionQueue, task: asyncio.Future):
        self._queue = queue
        self._task = task

    async def _value(self) -> Any:
        return await asyncio.shield(self._task)

    def get_member(self, name: str) -> MemberHandle:
        return MemberHandle(self._queue, self._value, name, root=None)

    async def _materialize(self) -> Any:
        # only failures queued ahead of this call reach its result
        await self._queue.settle()
        return await self._value()

    def __await__(self):
        return self._materialize().__await__()

    def __repr__(self) -> str:
        return "<ValueHandle>"


def start_chain(factory: Callable[[], Any], *, value_methods: Iterable[str] = ()) -> ChainHandle:
    """Start a fluent chain over the page object ``factory`` produces."""
    return ChainHandle(factory, value_methods=value_methods)
