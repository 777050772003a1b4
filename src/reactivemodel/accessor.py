"""
Attribute access layer over a model's stored value tree.

Two pieces:
- FieldAccessor: class-level descriptor generated for each schema field when
  the model class is defined
- NestedAccessor: path-qualified view returned when a dict-valued field is
  read, giving attribute syntax down any depth:

      model.profile.address.city          # read
      model.profile.address.city = 'Oslo' # write into the stored tree

Views are disposable. They hold only (model, path) and resolve against the
current stored tree on every access, so a view never exposes or caches the
underlying dict. List and tuple values are handed out as deep copies; changing
one in place does not touch the model, use ``set_value`` instead.
"""
from collections.abc import Mapping
from typing import Any, Iterator, TYPE_CHECKING

from reactivemodel.value_ops import deep_clone, is_array, is_plain_object

if TYPE_CHECKING:
    from reactivemodel.data_model import DataModel


def wrap_value(model: 'DataModel', path: str, value: Any) -> Any:
    """Return a NestedAccessor for dict values, a deep copy for lists and
    tuples, the value itself otherwise."""
    if is_plain_object(value):
        return NestedAccessor(model, path)
    if is_array(value):
        return deep_clone(value)
    return value


class FieldAccessor:
    """Descriptor exposing one top-level schema field on model instances.

    Read-only descriptor: assignment is routed by ``DataModel.__setattr__``
    through ``set_value`` so immutability and watchers apply to it.
    """

    def __init__(self, key: str):
        self.key = key

    def __get__(self, instance: 'DataModel', owner: type) -> Any:
        if instance is None:
            return self
        return instance._read_field(self.key)

    def __repr__(self) -> str:
        return f"FieldAccessor({self.key!r})"


class NestedAccessor(Mapping):
    """Read/write view of a nested dict inside a model field.

    Behaves as a read-only Mapping for reads (so it compares equal to a dict
    with the same content) and routes attribute or item assignment to the
    owning model.

    Keys that clash with Mapping methods (``keys``, ``get``, ...) or with
    ``path``/``to_dict`` are reachable with item syntax only.
    """

    def __init__(self, model: 'DataModel', path: str):
        object.__setattr__(self, '_model', model)
        object.__setattr__(self, '_path', path)

    def _target(self) -> dict:
        value = self._model._get_path(self._path)
        if not is_plain_object(value):
            raise AttributeError(f"{self._path!r} no longer holds a nested object")
        return value

    def _child_path(self, key: str) -> str:
        return f'{self._path}.{key}'

    def __getitem__(self, key: str) -> Any:
        target = self._target()
        if key not in target:
            raise KeyError(key)
        return wrap_value(self._model, self._child_path(key), target[key])

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._target()))

    def __len__(self) -> int:
        return len(self._target())

    def __getattr__(self, name: str) -> Any:
        if name.startswith('__'):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"{self._path!r} has no field {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._model._set_path(self._child_path(name), value)

    def __setitem__(self, key: str, value: Any) -> None:
        self._model._set_path(self._child_path(key), value)

    @property
    def path(self) -> str:
        return self._path

    def to_dict(self) -> dict:
        """Deep copy of the viewed subtree."""
        return deep_clone(self._target())

    def __repr__(self) -> str:
        return f"NestedAccessor({self._path!r}, {self._target()!r})"
