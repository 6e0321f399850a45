"""Hook registry - priority-ordered filter and event pipelines."""

import bisect
import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from contentstore.errors import is_error


@dataclass
class Hook:
    callback: Callable
    priority: int = 0
    args: tuple = ()
    once: bool = False
    seq: int = field(default=0, compare=False)

    @property
    def sort_key(self) -> tuple[int, int]:
        return self.priority, self.seq


async def _call(callback: Callable, *args) -> Any:
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class HookRegistry:
    """Named filter and event pipelines.

    Handlers run in ascending priority; equal priorities keep registration
    order. Handlers may be plain functions or coroutines. A handler that
    returns a Failure stops its pipeline and the Failure is returned.
    """

    def __init__(self):
        self._filters: dict[str, list[Hook]] = {}
        self._events: dict[str, list[Hook]] = {}
        self._seq = 0

    def _add(self, hooks: dict[str, list[Hook]], name: str, callback: Callable, priority, args, once) -> bool:
        if not callable(callback):
            return False
        self._seq += 1
        hook = Hook(callback, priority, tuple(args or ()), once, self._seq)
        pipeline = hooks.setdefault(name, [])
        keys = [h.sort_key for h in pipeline]
        pipeline.insert(bisect.bisect_right(keys, hook.sort_key), hook)
        return True

    @staticmethod
    def _remove(hooks: dict[str, list[Hook]], name: str, callback: Callable | None) -> None:
        if callback is None:
            hooks.pop(name, None)
            return
        pipeline = hooks.get(name, [])
        for i, hook in enumerate(pipeline):
            if hook.callback is callback:
                del pipeline[i]
                break

    def add_filter(self, name: str, callback: Callable, priority: int = 0, args=None, once: bool = False) -> bool:
        return self._add(self._filters, name, callback, priority, args, once)

    def add_event(self, name: str, callback: Callable, priority: int = 0, args=None, once: bool = False) -> bool:
        return self._add(self._events, name, callback, priority, args, once)

    def remove_filter(self, name: str, callback: Callable | None = None) -> None:
        """Remove one filter handler, or the whole pipeline when no callback is given."""
        self._remove(self._filters, name, callback)

    def remove_event(self, name: str, callback: Callable | None = None) -> None:
        self._remove(self._events, name, callback)

    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))

    def has_event(self, name: str) -> bool:
        return bool(self._events.get(name))

    async def apply_filters(self, name: str, value: Any, *args) -> Any:
        """Pass ``value`` through every filter; each receives the previous result.

        Handlers are called as ``callback(value, *args, *hook_args)``.
        """
        for hook in list(self._filters.get(name, [])):
            value = await _call(hook.callback, value, *args, *hook.args)
            if hook.once:
                self._remove(self._filters, name, hook.callback)
            if is_error(value):
                logger.debug("Filter {} stopped by {}", name, getattr(hook.callback, "__name__", hook.callback))
                return value
        return value

    async def trigger(self, name: str, *args) -> Any:
        """Run every event handler as ``callback(*hook_args, *args)``.

        Returns False when nothing is registered, True once all handlers ran.
        """
        if not self.has_event(name):
            return False
        for hook in list(self._events[name]):
            result = await _call(hook.callback, *hook.args, *args)
            if hook.once:
                self._remove(self._events, name, hook.callback)
            if is_error(result):
                logger.debug("Event {} stopped by {}", name, getattr(hook.callback, "__name__", hook.callback))
                return result
        return True
