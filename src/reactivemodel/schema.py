"""
Schema value object and schema composition.

A Schema is two mappings:
- fields: name -> default value (mutable fields)
- immutable_fields: name -> constant (fixed for every instance)

Composition is value-level: ``base.extend(...)`` returns a new Schema whose
mappings are the unions of both, later entries overriding earlier ones. The
result is consumed by the same DataModel machinery as any other schema.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from reactivemodel.value_ops import deep_clone


def _frozen(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Schema:
    """Immutable schema definition. Defaults are cloned per instance."""
    fields: Mapping[str, Any] = field(default_factory=dict)
    immutable_fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'fields', _frozen(self.fields))
        object.__setattr__(self, 'immutable_fields', _frozen(self.immutable_fields))

    @property
    def union(self) -> Dict[str, Any]:
        """All addressable fields; immutable constants win on collision."""
        return {**self.fields, **self.immutable_fields}

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(self.union)

    def is_immutable(self, key: str) -> bool:
        return key in self.immutable_fields

    def is_mutable(self, key: str) -> bool:
        return key in self.fields and key not in self.immutable_fields

    def __contains__(self, key: object) -> bool:
        return key in self.fields or key in self.immutable_fields

    def extend(
        self,
        fields: Optional[Mapping[str, Any]] = None,
        immutable_fields: Optional[Mapping[str, Any]] = None,
    ) -> 'Schema':
        """Return a new Schema with extra or overriding fields.

        Defaults are overridden per key, not deep-merged: ``{'a': {'x': 1}}``
        extended with ``{'a': {'y': 2}}`` yields ``{'a': {'y': 2}}``.
        """
        return Schema(
            fields={**self.fields, **deep_clone(dict(fields or {}))},
            immutable_fields={**self.immutable_fields, **deep_clone(dict(immutable_fields or {}))},
        )


def merge_schemas(base: Schema, *extensions: Schema) -> Schema:
    """Fold several schemas left to right with ``Schema.extend``."""
    merged = base
    for extension in extensions:
        merged = merged.extend(extension.fields, extension.immutable_fields)
    return merged
