"""
Viewcast Transformers

Transformers post-process a rendered dict in place after all fields have been written.
They run in the order their view declares them, each one sees the dict as left by the
previous one.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from abc import ABC, abstractmethod
from enum import Enum, unique
from typing import Any, Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .tools import class_name, fmt_type, fmt_value


# Classes --------------------------------------------------------------------------------------------------------------

class Transformer(ABC):
    """Interface of a rendered dict post-processor."""

    @abstractmethod
    def transform(self, data: dict[str, Any], obj: Any, local_options: dict[str, Any]) -> None:
        """
        Mutate data in place.

        Args:
            data: The rendered dict of obj, may be modified in any way.
            obj: The source object the dict was rendered from.
            local_options: Render options without 'view'.
        """

    def __repr__(self) -> str:
        return f"{class_name(self)}()"


class FunctionTransformer(Transformer):
    """
    Adapts a plain callable fn(data, obj, local_options) to the Transformer interface.

    Examples:
        >>> t = FunctionTransformer(lambda data, obj, options: data.pop("secret", None))
        >>> data = {"id": 1, "secret": "x"}
        >>> t.transform(data, None, {})
        >>> data
        {'id': 1}
    """

    def __init__(self, fn: Callable[[dict, Any, dict], Any]) -> None:
        if not callable(fn):
            raise TypeError(f"fn must be callable, but found {fmt_type(fn)}")
        self.fn = fn

    def transform(self, data: dict[str, Any], obj: Any, local_options: dict[str, Any]) -> None:
        self.fn(data, obj, local_options)

    def __repr__(self) -> str:
        return f"FunctionTransformer({getattr(self.fn, '__qualname__', self.fn)!r})"


@unique
class KeyCase(str, Enum):
    LOWER_CAMEL = "lower_camel"
    UPPER_CAMEL = "upper_camel"


class KeyCaseTransformer(Transformer):
    """
    Renames snake_case top-level keys to camel case, keeping key order.

    Non-str keys are left as they are. If two keys collapse to the same name the later one wins.

    Examples:
        >>> data = {"id": 1, "created_at": "2024-01-02"}
        >>> KeyCaseTransformer().transform(data, None, {})
        >>> data
        {'id': 1, 'createdAt': '2024-01-02'}
    """

    def __init__(self, style: str = KeyCase.LOWER_CAMEL) -> None:
        try:
            self.style = KeyCase(style)
        except ValueError:
            valid = ", ".join(f"'{v.value}'" for v in KeyCase)
            raise ValueError(f"Unknown key case style: {fmt_value(style)}. Expected: {valid}") from None

    def transform(self, data: dict[str, Any], obj: Any, local_options: dict[str, Any]) -> None:
        renamed = [(self.convert(k) if isinstance(k, str) else k, v) for k, v in data.items()]
        data.clear()
        data.update(renamed)

    def convert(self, key: str) -> str:
        """
        Return key in the configured camel case.

        Leading underscores are kept, e.g. "_id" stays "_id" and "__created_at" becomes
        "__createdAt" in lower camel case.
        """
        stripped = key.lstrip("_")
        prefix = key[:len(key) - len(stripped)]
        head, *rest = stripped.split("_")
        tail = "".join(part[:1].upper() + part[1:] for part in rest)
        if self.style == KeyCase.UPPER_CAMEL:
            head = head[:1].upper() + head[1:]
        return prefix + head + tail

    def __repr__(self) -> str:
        return f"KeyCaseTransformer({self.style.value!r})"
