"""
Process-wide default options for model instances.

Each instance resolves its options once at construction:
module defaults < class ``OPTIONS`` < options given to ``define_model``.

- debug: emit per-operation debug traces through the instance logger
- name: instance logger name suffix (``reactivemodel.<name>``)
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ModelOptions:
    debug: bool = False
    name: str = 'DataModel'


_default_options: ModelOptions = ModelOptions()


def _check_keys(overrides: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(ModelOptions)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown model option(s): {sorted(unknown)}. Known: {sorted(known)}")


def configure(**overrides: Any) -> ModelOptions:
    """Update the module defaults used by every instance created afterwards.

    Args:
        **overrides: Option values (``debug``, ``name``)

    Returns:
        The new default options
    """
    global _default_options
    _check_keys(overrides)
    _default_options = replace(_default_options, **overrides)
    return _default_options


def get_default_options() -> ModelOptions:
    return _default_options


def reset_default_options() -> None:
    """Restore built-in defaults. Used by tests."""
    global _default_options
    _default_options = ModelOptions()


def resolve_options(*overrides: Optional[Mapping[str, Any]]) -> ModelOptions:
    """Merge the module defaults with override mappings, later ones winning."""
    options = _default_options
    for override in overrides:
        if not override:
            continue
        _check_keys(override)
        options = replace(options, **override)
    return options
