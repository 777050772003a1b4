"""
Reactive data models for single-process applications.

Declare a schema of fields with defaults, then work with live instances whose
fields are plain attributes, including nested dicts at any depth.

Key Features:
- Schema defaults deep-cloned per instance and deep-merged with constructor data
- Immutable fields fixed for every instance
- Attribute read/write through nested dict fields
- Computed fields memoized until the next mutation
- Watchers with shallow or deep change detection and immediate firing

Quick Start:
    >>> from reactivemodel import DataModel
    >>>
    >>> class Counter(DataModel):
    ...     FIELDS = {'count': 0, 'profile': {'name': 'x', 'age': 1}}
    ...     IMMUTABLE_FIELDS = {'kind': 'counter'}
    >>>
    >>> counter = Counter({'profile': {'age': 2}})
    >>> counter.profile.age
    2
    >>> _ = counter.computed('double', lambda self: self.count * 2)
    >>> _ = counter.watch('count', lambda self, old, new: print(old, '->', new))
    >>> counter.count = 5
    0 -> 5
    >>> counter.double
    10

Modules:
    - data_model: DataModel base class and define_model factory
    - accessor: attribute views over nested dict fields
    - computed: memoized computed cells
    - watcher: change watchers
    - field_store: per-field storage slots
    - schema: Schema value object and composition
    - config: process-wide default options
    - value_ops: clone/merge/path helpers
"""

from reactivemodel.value_ops import (
    MISSING,
    deep_clone,
    deep_merge,
    get_by_path,
    is_plain_object,
    pick_data,
    resolve_value,
    set_by_path,
)

from reactivemodel.computed import ComputedCell, ComputedOptions
from reactivemodel.watcher import ChangeWatcher, WatchOptions
from reactivemodel.field_store import FieldStore
from reactivemodel.schema import Schema, merge_schemas
from reactivemodel.accessor import FieldAccessor, NestedAccessor

from reactivemodel.config import (
    ModelOptions,
    configure,
    get_default_options,
    reset_default_options,
)

from reactivemodel.data_model import DataModel, define_model

__all__ = [
    # Values
    'MISSING',
    'deep_clone',
    'deep_merge',
    'get_by_path',
    'is_plain_object',
    'pick_data',
    'resolve_value',
    'set_by_path',
    # Cells
    'ComputedCell',
    'ComputedOptions',
    'ChangeWatcher',
    'WatchOptions',
    'FieldStore',
    # Schema
    'Schema',
    'merge_schemas',
    # Accessors
    'FieldAccessor',
    'NestedAccessor',
    # Configuration
    'ModelOptions',
    'configure',
    'get_default_options',
    'reset_default_options',
    # Models
    'DataModel',
    'define_model',
]

__version__ = '1.0.0'
__description__ = 'Reactive schema-driven data models'
