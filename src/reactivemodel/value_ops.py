"""
Value utilities shared by every part of the reactive model.

Pure functions over plain Python containers:
- deep_clone: copy dict/list/tuple trees, leave everything else by reference
- deep_merge: recursive in-place merge of dict trees
- set_by_path / get_by_path: dotted-path access into nested dicts
- resolve_value: combine a schema default with a supplied value

Only ``dict`` counts as a "plain object". Dataclasses, custom classes and
mapping subclasses are opaque values and are never cloned or merged into.
"""
from typing import Any, Dict, Iterable, Optional


class _Missing:
    """Sentinel type for "no value supplied" (distinct from ``None``)."""

    _instance: Optional['_Missing'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING = _Missing()

_FALSY_SCALARS = (bool, int, float, complex, str, bytes)


def is_plain_object(value: Any) -> bool:
    """True for plain ``dict`` values only."""
    return type(value) is dict


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_container(value: Any) -> bool:
    """True for values that deep_clone copies: dicts, lists and tuples."""
    return is_plain_object(value) or is_array(value)


def is_absent_override(value: Any, skip_falsy: bool = True) -> bool:
    """Decide whether a merge source value counts as "not given".

    ``MISSING`` is always absent. With ``skip_falsy`` the merge also treats
    ``None``, ``False``, ``0`` and ``''`` as absent, while empty containers
    still override.
    """
    if value is MISSING:
        return True
    if not skip_falsy:
        return False
    if value is None:
        return True
    return isinstance(value, _FALSY_SCALARS) and not value


def deep_clone(value: Any) -> Any:
    """Recursively copy dicts, lists and tuples.

    Args:
        value: Any value. Cyclic container graphs are not supported.

    Returns:
        A new container of the same kind for dict/list/tuple input, the
        value itself otherwise.
    """
    if is_plain_object(value):
        return {key: deep_clone(item) for key, item in value.items()}
    if isinstance(value, list):
        return [deep_clone(item) for item in value]
    if isinstance(value, tuple):
        return tuple(deep_clone(item) for item in value)
    return value


def deep_merge(target: Dict[str, Any], *sources: Dict[str, Any], skip_falsy: bool = True) -> Dict[str, Any]:
    """Merge source dicts into ``target`` in place.

    When both sides hold a dict under the same key the merge recurses.
    Otherwise the source value replaces the target value, unless it is an
    absent override (see ``is_absent_override``), in which case the key
    keeps whatever the target had (``None`` when the target lacked it).

    Note:
        With the default ``skip_falsy=True`` a source value of ``0``,
        ``False``, ``''`` or ``None`` never overwrites the target. Pass
        ``skip_falsy=False`` to let every present value win.

    Args:
        target: Dict mutated in place
        *sources: Dicts merged left to right
        skip_falsy: Treat falsy scalars and ``None`` as absent

    Returns:
        ``target``
    """
    for source in sources:
        for key, value in source.items():
            current = target.get(key, MISSING)
            if is_plain_object(current) and is_plain_object(value):
                target[key] = deep_merge(current, value, skip_falsy=skip_falsy)
                continue

            if is_absent_override(value, skip_falsy):
                target[key] = None if current is MISSING else current
            else:
                target[key] = value

    return target


def set_by_path(root: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """Assign ``value`` at a dotted ``path`` inside ``root``.

    Missing or non-dict intermediate segments are replaced by empty dicts.

    Args:
        root: Dict mutated in place
        path: Dotted path such as ``'profile.address.city'``
        value: Value stored at the last segment

    Returns:
        ``root``
    """
    segments = path.split('.')
    node = root
    for segment in segments[:-1]:
        if not is_plain_object(node.get(segment)):
            node[segment] = {}
        node = node[segment]

    node[segments[-1]] = value
    return root


def get_by_path(root: Dict[str, Any], path: str, default: Any = MISSING) -> Any:
    """Read the value at a dotted ``path`` inside ``root``.

    Raises:
        KeyError: When a segment is missing and no ``default`` was given
    """
    node: Any = root
    for segment in path.split('.'):
        if not is_plain_object(node) or segment not in node:
            if default is MISSING:
                raise KeyError(path)
            return default
        node = node[segment]
    return node


def resolve_value(default: Any, supplied: Any = MISSING) -> Any:
    """Combine a schema default with a supplied value.

    - supplied dict: merged onto a clone of the default
    - supplied non-dict: returned as is
    - nothing supplied: a clone of the default

    The result never shares containers with ``default``.
    """
    if supplied is not MISSING:
        if is_plain_object(supplied):
            base = deep_clone(default) if is_plain_object(default) else {}
            return deep_merge(base, supplied)
        return supplied

    return deep_clone(default)


def pick_data(data: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """Keep the entries of ``data`` whose key is in ``keys``, in input order."""
    allowed = set(keys)
    return {key: value for key, value in data.items() if key in allowed}
