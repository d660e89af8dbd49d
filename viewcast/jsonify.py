"""
Viewcast JSON Tools

JSON-safe normalization of rendered value trees and the default JSON generator.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import datetime as dt
import json
import math

from dataclasses import dataclass, field, fields, is_dataclass, replace
from decimal import Decimal
from enum import Enum, unique
from pathlib import PurePath
from typing import Any, Callable, Dict, Type
from uuid import UUID

# Local ----------------------------------------------------------------------------------------------------------------
from .tools import fmt_type, fmt_value


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class HookMode(str, Enum):
    """
    Object conversion strategy for non-builtin objects:
        - "dict": try object's as_json() and then to_dict() methods, then fallback
        - "none": skip object hooks
    """
    DICT = "dict"
    NONE = "none"


@dataclass
class JsonifyOptions:
    """
    Configuration of the JSON-safe normalization performed by as_json() and dumps().

    Attributes:
        hook_mode: Whether objects' as_json()/to_dict() hooks are used, see HookMode.
        max_depth: Maximum nesting depth of the value tree; deeper trees raise ValueError.
        sort_keys: Sort mapping keys in dumps() output.
        indent: Indentation passed to json.dumps() by dumps().
        ensure_ascii: Escape non-ASCII characters in dumps() output.

    Type Handler System:
        - Handlers receive (value, options) and return an already JSON-safe value, or a value
          that is normalized further
        - Exact type match first, then the nearest ancestor via MRO
        - Handlers take precedence over the builtin coercion rules

    Examples:
        >>> opts = JsonifyOptions().add_type_handler(complex, lambda c, o: [c.real, c.imag])
        >>> as_json({"z": 1 + 2j}, opts)
        {'z': [1.0, 2.0]}
    """
    hook_mode: str = HookMode.DICT
    max_depth: int = 64
    sort_keys: bool = False
    indent: int | None = None
    ensure_ascii: bool = False

    _type_handlers: Dict[Type, Callable[[Any, 'JsonifyOptions'], Any]] = field(default_factory=dict)

    def add_type_handler(self,
                         typ: type,
                         handler: Callable[[Any, "JsonifyOptions"], Any],
                         ) -> "JsonifyOptions":
        """
        Register or override a handler for a specific type.

        Returns:
            Self, to allow chaining.

        Raises:
            TypeError: If typ is not a type or handler is not callable.
        """
        if not isinstance(typ, type):
            raise TypeError(f"typ must be a type, got {fmt_type(typ)}")
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {fmt_type(handler)}")

        self._type_handlers[typ] = handler
        return self

    def get_type_handler(self, obj: Any) -> Callable[[Any, "JsonifyOptions"], Any] | None:
        """
        Get the handler for the object's type, exact or via the nearest ancestor in its MRO.
        """
        handlers = self._type_handlers
        if not handlers:
            return None

        obj_type = type(obj)
        if obj_type in handlers:
            return handlers[obj_type]

        for base in obj_type.__mro__[1:]:
            if base in handlers:
                return handlers[base]
        return None

    def remove_type_handler(self, typ: type) -> "JsonifyOptions":
        """
        Remove a handler for a specific type, if registered.

        Returns:
            Self, to allow chaining.
        """
        if not isinstance(typ, type):
            raise TypeError(f"typ must be a type, got {fmt_type(typ)}")
        self._type_handlers.pop(typ, None)
        return self

    def copy(self) -> "JsonifyOptions":
        """Return a copy with its own type handler registry."""
        return replace(self, _type_handlers=dict(self._type_handlers))

    @property
    def type_handlers(self) -> Dict[Type, Callable[[Any, 'JsonifyOptions'], Any]]:
        """Registered type handlers."""
        return self._type_handlers


# Methods --------------------------------------------------------------------------------------------------------------

def as_json(value: Any, options: JsonifyOptions | None = None) -> Any:
    """
    Deep-convert a value tree into JSON-representable primitives.

    Processing Order:
        1. Type handlers registered in options
        2. Enum members -> their value
        3. None, bool, int, str -> as-is; float -> as-is, or None when nan/inf
        4. datetime, date, time -> ISO 8601 str; timedelta -> total seconds
        5. Decimal, UUID, paths -> str; bytes, bytearray -> utf-8 text
        6. Mappings -> dict with str keys
        7. Dataclass instances, namedtuples -> dict
        8. Objects with as_json() or to_dict() hooks (see HookMode)
        9. Other sized iterables -> list
        10. Anything else -> str(value)

    Args:
        value: The value tree to normalize, usually the result of Renderer.render_as_hash().
        options: JsonifyOptions, defaults used if None.

    Returns:
        A tree made of dict, list, str, int, float, bool and None only.

    Raises:
        TypeError: If options is not a JsonifyOptions or a to_dict() hook returns a non-mapping.
        ValueError: If the tree is nested deeper than options.max_depth or hook_mode is unknown.

    Examples:
        >>> as_json({"at": dt.date(2024, 1, 2), "tags": {"a"}})
        {'at': '2024-01-02', 'tags': ['a']}
    """
    if not isinstance(options, (JsonifyOptions, type(None))):
        raise TypeError(f"options must be a JsonifyOptions instance, but found {fmt_type(options)}")

    opt = options or JsonifyOptions()
    return _as_json(value, opt, depth=0)


def dumps(value: Any, options: JsonifyOptions | None = None) -> str:
    """
    Encode a value tree to a JSON string after as_json() normalization.

    This is the default generator of viewcast.config.Configuration.

    Examples:
        >>> dumps({"id": 1, "at": dt.date(2024, 1, 2)})
        '{"id": 1, "at": "2024-01-02"}'
    """
    opt = options or JsonifyOptions()
    return json.dumps(as_json(value, opt),
                      sort_keys=opt.sort_keys,
                      indent=opt.indent,
                      ensure_ascii=opt.ensure_ascii)


# Private Methods ------------------------------------------------------------------------------------------------------

def _as_json(value: Any, opt: JsonifyOptions, depth: int) -> Any:
    if depth > opt.max_depth:
        raise ValueError(f"Value tree is nested deeper than max_depth={opt.max_depth}, "
                         f"possible reference cycle at {fmt_type(value)}")

    if handler := opt.get_type_handler(value):
        result = handler(value, opt)
        if isinstance(value, _JSON_PRIMITIVES):
            return result  # No second pass, a handler of str may return str
        return _as_json(result, opt, depth + 1)

    if isinstance(value, Enum):
        return _as_json(value.value, opt, depth + 1)

    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, float):
        return value if math.isfinite(value) else None

    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()

    if isinstance(value, dt.timedelta):
        return value.total_seconds()

    if isinstance(value, (Decimal, UUID, PurePath)):
        return str(value)

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")

    if isinstance(value, abc.Mapping):
        return _mapping_as_json(value, opt, depth)

    if is_dataclass(value) and not isinstance(value, type):
        as_dict = {f.name: getattr(value, f.name) for f in fields(value)}
        return _mapping_as_json(as_dict, opt, depth)

    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return _mapping_as_json(value._asdict(), opt, depth)

    hooked = _from_hooks(value, opt)
    if hooked is not _NO_HOOK:
        return _as_json(hooked, opt, depth + 1)

    if isinstance(value, (abc.Sized, abc.Iterator)) and isinstance(value, abc.Iterable):
        return [_as_json(item, opt, depth + 1) for item in value]

    return str(value)


def _mapping_as_json(value: abc.Mapping, opt: JsonifyOptions, depth: int) -> dict[str, Any]:
    return {_key_as_json(k): _as_json(v, opt, depth + 1) for k, v in value.items()}


def _key_as_json(key: Any) -> str:
    """JSON object keys are always strings."""
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, str):
        return str(key)
    if isinstance(key, bool) or key is None:
        return json.dumps(key)
    return str(key)


_NO_HOOK = object()
_JSON_PRIMITIVES = (str, int, float, bool, type(None))


def _from_hooks(value: Any, opt: JsonifyOptions) -> Any:
    """Return value.as_json() or value.to_dict() if available and the hook mode allows."""
    if opt.hook_mode == HookMode.NONE:
        return _NO_HOOK
    if opt.hook_mode != HookMode.DICT:
        valid = ", ".join([f"'{v.value}'" for v in HookMode])
        raise ValueError(f"Unknown hook_mode value: {fmt_value(opt.hook_mode)}. Expected: {valid}")

    if isinstance(value, type):
        return _NO_HOOK

    fn = getattr(value, "as_json", None)
    if callable(fn):
        return fn()

    fn = getattr(value, "to_dict", None)
    if callable(fn):
        dict_ = fn()
        if not isinstance(dict_, abc.Mapping):
            raise TypeError(f"Object's to_dict() must return a Mapping, but got {fmt_type(dict_)}")
        return dict_

    return _NO_HOOK
