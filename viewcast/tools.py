#
# Viewcast Tools
#

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Iterable


# Methods --------------------------------------------------------------------------------------------------------------

def class_name(obj: Any) -> str:
    """
    Get the class name of an object or a class.

    Examples:
        >>> class_name(10)
        'int'
        >>> class_name(int)
        'int'
    """
    cls = obj if isinstance(obj, type) else type(obj)
    return cls.__qualname__


def fmt_names(names: Iterable[Any], *, max_items: int = 8) -> str:
    """
    Format a collection of names (e.g. defined views) as a short comma separated list.

    Examples:
        >>> fmt_names(["default", "extended"])
        "'default', 'extended'"
        >>> fmt_names(range(4), max_items=2)
        '0, 1, ...'
    """
    items = list(names)
    head = ", ".join(repr(n) for n in items[:max_items])
    return head + (", ..." if len(items) > max_items else "")


def fmt_type(obj: Any, *, max_repr: int = 120) -> str:
    """Format type information for exception messages.

    Accepts either a type or an instance; instances are reported by their type.

    Examples:
        >>> fmt_type(42)
        '<type: int>'
        >>> fmt_type(ValueError)
        '<type: ValueError>'
    """
    target_type = obj if isinstance(obj, type) else type(obj)

    try:
        type_name = target_type.__name__
    except AttributeError:
        type_name = str(target_type)

    return _fmt_format_pair("type", _fmt_truncate(type_name, max_repr))


def fmt_value(x: Any, *, max_repr: int = 120) -> str:
    """
    Format a single value as a type-value pair for exception messages and logs.

    Broken __repr__ methods are reported instead of raised.

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
        >>> fmt_value("hello world", max_repr=8)
        "<str: 'hell'...>"
    """
    t = type(x).__name__

    try:
        base_repr = repr(x)
    except Exception as e:
        base_repr = f"<{t} object (repr failed: {type(e).__name__})>"

    base_repr = base_repr.replace(">", "\\>")
    return _fmt_format_pair(t, _fmt_truncate(base_repr, max_repr))


# Private Methods ------------------------------------------------------------------------------------------------------

def _fmt_truncate(s: str, max_len: int, ellipsis: str = "...") -> str:
    """
    Truncate s to at most max_len characters and append the ellipsis.

    Quoted reprs keep their quotes with the ellipsis placed after the closing quote.
    """
    if max_len <= 0:
        return ""
    if len(s) <= max_len:
        return s

    if len(s) >= 2 and s[0] in ("'", '"') and s[-1] == s[0]:
        inner = s[1:1 + max(1, max_len - 4)]
        return f"{s[0]}{inner}{s[0]}{ellipsis}"

    return s[:max(1, max_len)] + ellipsis


def _fmt_format_pair(type_name: str, value_repr: str) -> str:
    return f"<{type_name}: {value_repr}>"
