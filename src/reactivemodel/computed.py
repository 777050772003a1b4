"""
Computed cells: derived values with token-based memoization.

A ComputedCell wraps a getter (and optional setter) bound to a model
instance. The cached value stays valid while the model's mutation token is
unchanged; any successful write on the model bumps the token, so the next
read recomputes. ``cache=False`` turns memoization off and recomputes on
every read.
"""
from dataclasses import dataclass
import logging
from typing import Any, Callable, Mapping, Optional

from reactivemodel.value_ops import MISSING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComputedOptions:
    """Declaration of a computed field.

    ``get`` and ``set`` are called with the model instance as first argument,
    the same way ``property`` calls ``fget``/``fset``.
    """
    get: Callable[..., Any]
    set: Optional[Callable[..., None]] = None
    cache: bool = True

    @classmethod
    def coerce(cls, declaration: Any) -> 'ComputedOptions':
        """Normalize a callable, mapping, ``property`` or ComputedOptions."""
        if isinstance(declaration, ComputedOptions):
            return declaration
        if isinstance(declaration, property):
            if declaration.fget is None:
                raise TypeError("computed property needs a getter")
            return cls(get=declaration.fget, set=declaration.fset)
        if isinstance(declaration, Mapping):
            getter = declaration.get('get')
            if not callable(getter):
                raise TypeError(f"computed declaration needs a callable 'get', got {getter!r}")
            setter = declaration.get('set')
            if setter is not None and not callable(setter):
                raise TypeError(f"computed 'set' must be callable, got {setter!r}")
            return cls(get=getter, set=setter, cache=declaration.get('cache', True))
        if callable(declaration):
            return cls(get=declaration)
        raise TypeError(f"computed declaration must be callable or a mapping, got {type(declaration).__name__}")


class ComputedCell:
    """Lazily evaluated value with a cache keyed on a token.

    Example:
        cell = ComputedCell(lambda: a + b, token_provider=lambda: model_token)
        cell.value  # computes
        cell.value  # cached until model_token changes
    """

    def __init__(
        self,
        getter: Callable[[], Any],
        setter: Optional[Callable[[Any], None]] = None,
        token_provider: Optional[Callable[[], int]] = None,
        cache: bool = True,
    ):
        """
        Args:
            getter: Zero-argument callable producing the value
            setter: One-argument callable receiving written values, or None
                    for a read-only cell (writes are ignored)
            token_provider: Returns the current invalidation token. Without
                            one the cached value only expires via invalidate()
            cache: False recomputes on every read
        """
        self._getter = getter
        self._setter = setter
        self._token_provider = token_provider or (lambda: 0)
        self.cache = cache
        self.computed = False
        self._value: Any = MISSING
        self._cached_token: int = -1

    @property
    def value(self) -> Any:
        current_token = self._token_provider()
        if self.cache and self.computed and current_token == self._cached_token:
            return self._value

        value = self._getter()
        self._value = value
        self._cached_token = current_token
        self.computed = True
        return value

    @value.setter
    def value(self, new_value: Any) -> None:
        if self._setter is None:
            logger.debug("Ignoring write to read-only computed cell")
            return
        self._setter(new_value)

    @property
    def has_setter(self) -> bool:
        return self._setter is not None

    def invalidate(self) -> None:
        """Force the next read to recompute."""
        self.computed = False
        self._cached_token = -1

    def __repr__(self) -> str:
        state = f"cached={self._value!r}" if self.computed else "dirty"
        return f"ComputedCell({state}, cache={self.cache})"
