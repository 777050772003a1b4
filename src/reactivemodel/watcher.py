"""
Change watchers for model fields.

A ChangeWatcher remembers the last value it saw and calls its handler with
``(old, new)`` whenever ``emit`` receives a value that counts as different.

Sameness:
- containers (dict/list/tuple): identity only, so in-place mutation of the
  same container is invisible unless ``deep`` is on
- scalars (None, bool, numbers, str, bytes): same type and equal
- anything else: identity

Deep mode makes a container fire even when the very same object is emitted
again. Two emissions of an unchanged container therefore both fire.
"""
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from reactivemodel.value_ops import MISSING, is_container

_SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)


@dataclass(frozen=True)
class WatchOptions:
    """Declaration of a watcher. ``data`` overrides the captured baseline."""
    handler: Callable[[Any, Any], Any]
    deep: bool = False
    immediate: bool = False
    data: Any = MISSING

    @classmethod
    def coerce(cls, declaration: Any) -> 'WatchOptions':
        """Normalize a handler callable, mapping or WatchOptions."""
        if isinstance(declaration, WatchOptions):
            return declaration
        if isinstance(declaration, Mapping):
            handler = declaration.get('handler')
            if not callable(handler):
                raise TypeError(f"watch declaration needs a callable 'handler', got {handler!r}")
            return cls(
                handler=handler,
                deep=bool(declaration.get('deep', False)),
                immediate=bool(declaration.get('immediate', False)),
                data=declaration.get('data', MISSING),
            )
        if callable(declaration):
            return cls(handler=declaration)
        raise TypeError(f"watch declaration must be callable or a mapping, got {type(declaration).__name__}")


def is_same_value(old: Any, new: Any) -> bool:
    """Return True when ``new`` should not count as a change from ``old``."""
    if old is new:
        return True
    if isinstance(new, _SCALAR_TYPES):
        return type(old) is type(new) and old == new
    return False


class ChangeWatcher:
    """Fires a handler when an observed value changes."""

    def __init__(
        self,
        handler: Callable[[Any, Any], Any],
        data: Any = None,
        deep: bool = False,
        immediate: bool = False,
    ):
        self.handler = handler
        self.deep = deep
        self.immediate = immediate
        self._data = data

        if immediate:
            handler(None, data)

    @property
    def data(self) -> Any:
        """Last observed value."""
        return self._data

    def emit(self, new_value: Any) -> 'ChangeWatcher':
        """Offer a new value; call the handler if it counts as a change."""
        if is_same_value(self._data, new_value):
            if not is_container(new_value):
                return self
            if not self.deep:
                return self

        old_value = self._data
        self.handler(old_value, new_value)
        self._data = new_value

        return self

    def __repr__(self) -> str:
        return f"ChangeWatcher(data={self._data!r}, deep={self.deep}, immediate={self.immediate})"
