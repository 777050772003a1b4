"""
DataModel: schema-driven reactive model instances.

A model type declares its schema as class attributes:

    class User(DataModel):
        FIELDS = {'count': 0, 'profile': {'name': 'x', 'age': 1}}
        IMMUTABLE_FIELDS = {'kind': 'user'}
        OPTIONS = {'name': 'User'}

When the class is defined, one FieldAccessor descriptor per field is put on
it. Instances then:
- merge constructor data with cloned defaults (immutable fields ignore data)
- expose every field as an attribute; dict fields come back as
  NestedAccessor views that can be read and written at any depth, list and
  tuple fields as copies
- reject writes to immutable or unknown fields with a logged warning
- support computed fields (memoized until the next mutation) and watchers

Errors raised inside computed getters/setters and watch handlers propagate
to the caller. Stored values are always updated before a handler runs.

A watch handler that writes a new value to the field it watches re-enters
``set_value`` and can recurse without bound; avoiding that is up to the
handler.
"""
import inspect
import itertools
import logging
import time
from types import MethodType
from typing import Any, Dict, Mapping, Optional, Type

from reactivemodel.accessor import FieldAccessor, wrap_value
from reactivemodel.computed import ComputedCell, ComputedOptions
from reactivemodel.config import ModelOptions, resolve_options
from reactivemodel.field_store import FieldStore
from reactivemodel.schema import Schema
from reactivemodel.value_ops import (
    MISSING,
    deep_clone,
    get_by_path,
    is_plain_object,
    pick_data,
    resolve_value,
    set_by_path,
)
from reactivemodel.watcher import ChangeWatcher, WatchOptions

logger = logging.getLogger(__name__)

# Process-wide instance id source (single-threaded use)
_uid_counter = itertools.count()


class DataModel:
    """Base class for reactive models.

    Class attributes:
        FIELDS: Mutable field name -> default value
        IMMUTABLE_FIELDS: Immutable field name -> constant value
        SCHEMA: A Schema used instead of FIELDS/IMMUTABLE_FIELDS
        OPTIONS: Per-class overrides of ``reactivemodel.config`` options

    A subclass that sets only one of FIELDS/IMMUTABLE_FIELDS inherits the
    other from its parent model.
    """
    FIELDS: Dict[str, Any] = {}
    IMMUTABLE_FIELDS: Dict[str, Any] = {}
    SCHEMA: Optional[Schema] = None
    OPTIONS: Dict[str, Any] = {}

    _schema: Schema = Schema()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        # Raises TypeError on unknown option keys
        resolve_options(cls.OPTIONS)

        parent_schema = cls._schema
        schema = cls.__dict__.get('SCHEMA')
        if schema is None:
            schema = Schema(
                fields=cls.__dict__.get('FIELDS', parent_schema.fields),
                immutable_fields=cls.__dict__.get('IMMUTABLE_FIELDS', parent_schema.immutable_fields),
            )

        for key in schema.union:
            _check_field_name(cls, key)
            setattr(cls, key, FieldAccessor(key))

        cls._schema = schema
        logger.debug(f"Defined model {cls.__name__} with fields {list(schema.union)}")

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        """
        Args:
            data: Initial values. Dict values are deep-merged onto the field
                  default; keys outside the schema and immutable keys are
                  ignored.
        """
        cls = type(self)
        options = resolve_options(cls.OPTIONS)

        self._options: ModelOptions = options
        self._logger = logging.getLogger(f"reactivemodel.{options.name}")
        self._stores: Dict[str, FieldStore] = {}
        self._token = 0
        self._uid = next(_uid_counter)
        self._created_at = time.time()
        self._updated_at = self._created_at

        self._init_stores(dict(data or {}))

    def _init_stores(self, data: Dict[str, Any]) -> None:
        schema = self._schema
        for key in schema.union:
            if schema.is_immutable(key):
                if key in data:
                    self._trace(f"Ignoring initial data for immutable field ({key})")
                value = resolve_value(schema.immutable_fields[key])
            else:
                value = resolve_value(schema.fields[key], data.get(key, MISSING))
            self._stores[key] = FieldStore(value=value)

    # ========== INSTANCE METADATA ==========

    @classmethod
    def schema(cls) -> Schema:
        return cls._schema

    @property
    def model_uid(self) -> int:
        return self._uid

    @property
    def model_created_at(self) -> float:
        return self._created_at

    @property
    def model_updated_at(self) -> float:
        """Time of the last successful mutation (creation time until then)."""
        return self._updated_at

    @property
    def model_name(self) -> str:
        return self._options.name

    @property
    def model_debug(self) -> bool:
        return self._options.debug

    @property
    def model_data(self) -> Dict[str, Any]:
        """Snapshot of every schema field, detached from the stored values."""
        return self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the stored value of every schema field."""
        return deep_clone({key: self._stores[key].value for key in self._schema.union})

    # ========== ATTRIBUTE ROUTING ==========

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: computed fields live here
        if name.startswith('_'):
            raise AttributeError(name)
        store = self.__dict__.get('_stores', {}).get(name)
        if store is not None and store.is_computed:
            return store.computed.value
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return
        self._assign(name, value)

    def __getitem__(self, key: str) -> Any:
        store = self._stores.get(key)
        if store is not None and store.is_computed:
            return store.computed.value
        if store is None or not store.has_value:
            raise KeyError(key)
        return wrap_value(self, key, store.value)

    def __setitem__(self, key: str, value: Any) -> None:
        self._assign(key, value)

    def _assign(self, key: str, value: Any) -> None:
        store = self._stores.get(key)
        if store is not None and store.is_computed:
            store.computed.value = value
            return
        self.set_value(key, value)

    def _read_field(self, key: str) -> Any:
        store = self._stores.get(key)
        if store is None or not store.has_value:
            raise AttributeError(f"{type(self).__name__!r} object has no field {key!r}")
        return wrap_value(self, key, store.value)

    # ========== MUTATION ==========

    def set_value(self, key: str, value: Any) -> 'DataModel':
        """Set a top-level field.

        Immutable and unknown keys are rejected with a warning and leave the
        instance unchanged.

        Args:
            key: Field name
            value: New value, stored as given (not cloned)

        Returns:
            self, for chaining
        """
        if self._schema.is_immutable(key):
            self._logger.warning(f"({key}) key is not writable! please check.")
            return self

        if not self._schema.is_mutable(key):
            self._logger.warning(f"({key}) key is not exist! please check.")
            return self

        store = self._stores[key]
        store.update(value)
        self._touch()
        self._trace(f"set ({key}) = {value!r}")

        store.emit(value)
        self._emit_computed_watchers()
        return self

    def update_data(self, data: Mapping[str, Any]) -> 'DataModel':
        """Apply ``set_value`` for every key of ``data`` that the schema knows.

        Unknown keys are dropped silently; immutable keys still warn.
        """
        picked = pick_data(dict(data), self._schema.union)
        for key, value in picked.items():
            self.set_value(key, value)
        return self

    def _get_path(self, path: str) -> Any:
        key, _, rest = path.partition('.')
        store = self._stores.get(key)
        if store is None or not store.has_value:
            return None
        if not rest:
            return store.value
        return get_by_path(store.value, rest, None)

    def _set_path(self, path: str, value: Any) -> 'DataModel':
        """Write below a top-level field, e.g. ``'profile.address.city'``.

        Watchers on the top-level field receive the (same) root container, so
        only deep watchers fire.
        """
        key, _, rest = path.partition('.')
        if not rest:
            return self.set_value(key, value)

        if self._schema.is_immutable(key):
            self._logger.warning(f"({path}) key is not writable! please check.")
            return self

        if not self._schema.is_mutable(key):
            self._logger.warning(f"({path}) key is not exist! please check.")
            return self

        store = self._stores[key]
        root = store.value
        if not is_plain_object(root):
            root = {}
            store.update(root)

        set_by_path(root, rest, value)
        self._touch()
        self._trace(f"set ({path}) = {value!r}")

        store.emit(root)
        self._emit_computed_watchers()
        return self

    def _touch(self) -> None:
        self._updated_at = time.time()
        self._token += 1

    def _emit_computed_watchers(self) -> None:
        for store in list(self._stores.values()):
            if store.is_computed and store.watcher is not None:
                store.emit(store.computed.value)

    # ========== COMPUTED AND WATCH ==========

    def computed(self, key: str, declaration: Any) -> 'DataModel':
        """Install a derived field readable as ``self.<key>``.

        Args:
            key: Name of the computed field; must not be a schema field
            declaration: Getter callable, ``{'get': ..., 'set': ..., 'cache': ...}``,
                  a ``property`` or ComputedOptions. Getter and setter receive
                  the instance as first argument.

        Returns:
            self. On a name collision an error is logged and nothing is
            installed.
        """
        if key in self._schema:
            self._logger.error(f"compute key ({key}) has existed! please use other name")
            return self

        if key.startswith('_') or inspect.getattr_static(type(self), key, None) is not None:
            self._logger.error(f"compute key ({key}) is reserved by {type(self).__name__}! please use other name")
            return self

        options = ComputedOptions.coerce(declaration)
        setter = MethodType(options.set, self) if options.set is not None else None
        cell = ComputedCell(
            getter=MethodType(options.get, self),
            setter=setter,
            token_provider=lambda: self._token,
            cache=options.cache,
        )

        store = self._stores.setdefault(key, FieldStore())
        store.computed = cell
        self._trace(f"computed ({key}) installed")
        return self

    def watch(self, key: str, declaration: Any) -> 'DataModel':
        """Call a handler with ``(self, old, new)`` when ``key`` changes.

        The key is not validated, so a watcher may be registered before the
        computed field it observes. Registering again replaces the watcher.

        Args:
            key: Field or computed name
            declaration: Handler callable, ``{'handler': ..., 'deep': ...,
                  'immediate': ..., 'data': ...}`` or WatchOptions. The handler
                  is bound to the instance like a method.

        Returns:
            self
        """
        options = WatchOptions.coerce(declaration)

        store = self._stores.get(key)
        if options.data is not MISSING:
            baseline = options.data
        elif store is not None:
            baseline = store.current()
        else:
            baseline = None

        watcher = ChangeWatcher(
            MethodType(options.handler, self),
            data=baseline,
            deep=options.deep,
            immediate=options.immediate,
        )
        self._stores.setdefault(key, FieldStore()).watcher = watcher
        self._trace(f"watch ({key}) deep={options.deep} immediate={options.immediate}")
        return self

    def unwatch(self, key: str) -> 'DataModel':
        store = self._stores.get(key)
        if store is not None:
            store.watcher = None
        return self

    # ========== SCHEMA COMPOSITION ==========

    @classmethod
    def extend(
        cls,
        name: str,
        fields: Optional[Mapping[str, Any]] = None,
        immutable_fields: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Type['DataModel']:
        """Create a model class whose schema is this one plus the given fields."""
        return define_model(name, cls._schema.extend(fields, immutable_fields), options=options, base=cls)

    def _trace(self, message: str) -> None:
        if self._options.debug:
            self._logger.debug(f"[{self._uid}] {message}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(uid={self._uid}, data={self.model_data!r})"


def _check_field_name(cls: type, key: Any) -> None:
    """Reject field names that cannot live as attributes on ``cls``."""
    if not isinstance(key, str) or not key:
        raise ValueError(f"{cls.__name__}: field names must be non-empty strings, got {key!r}")
    if key.startswith('_') or '.' in key:
        raise ValueError(f"{cls.__name__}: field name {key!r} may not start with '_' or contain '.'")

    existing = inspect.getattr_static(cls, key, None)
    if existing is not None and not isinstance(existing, FieldAccessor):
        raise ValueError(f"{cls.__name__}: field name {key!r} clashes with an existing attribute")


def define_model(
    name: str,
    schema: Schema,
    options: Optional[Mapping[str, Any]] = None,
    base: Type[DataModel] = DataModel,
) -> Type[DataModel]:
    """Build a model class from a Schema value.

    Args:
        name: Class name, also the default logger name
        schema: Fields and immutable fields of the new model
        options: Option overrides on top of ``base.OPTIONS``
        base: DataModel subclass providing behavior

    Returns:
        The new model class
    """
    namespace = {
        'SCHEMA': schema,
        'OPTIONS': {**base.OPTIONS, 'name': name, **dict(options or {})},
        '__module__': base.__module__,
    }
    return type(name, (base,), namespace)
