"""
Per-field storage slot owned by a DataModel instance.
"""
from dataclasses import dataclass
from typing import Any, Optional

from reactivemodel.computed import ComputedCell
from reactivemodel.value_ops import MISSING
from reactivemodel.watcher import ChangeWatcher


@dataclass
class FieldStore:
    """One boxed field: the stored value plus its computed cell and watcher.

    ``value`` is MISSING for slots that only carry a computed cell, or a
    watcher registered before the field existed.
    """
    value: Any = MISSING
    computed: Optional[ComputedCell] = None
    watcher: Optional[ChangeWatcher] = None

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    @property
    def is_computed(self) -> bool:
        return self.computed is not None

    def update(self, value: Any) -> None:
        self.value = value

    def current(self) -> Any:
        """Value seen by watchers: the computed result or the stored value."""
        if self.computed is not None:
            return self.computed.value
        return None if self.value is MISSING else self.value

    def emit(self, value: Any) -> None:
        if self.watcher is not None:
            self.watcher.emit(value)
