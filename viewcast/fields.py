"""
Viewcast Fields

A field is one output key of a rendered dict. The renderer only relies on the Field
interface: name, skip() and extract(). Concrete variants are chosen when a view is
declared:

    AttributeField: reads an attribute, or a key of a mapping
    ComputedField: calls a function of (obj, local_options)
    AssociationField: renders a related object with another blueprint
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import datetime as dt
import inspect

from abc import ABC, abstractmethod
from typing import Any, Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .config import Configuration
from .errors import InvalidBlueprintError, InvalidDateTimeFormatError
from .rendering import Renderer
from .sentinels import UNSET, ifnotunset
from .tools import class_name, fmt_type

Condition = Callable[[str, Any, dict], bool]


# Classes --------------------------------------------------------------------------------------------------------------

class Field(ABC):
    """
    Interface of a single output key.

    Attributes:
        name: Output key, unique within a view.
    """
    name: str

    @abstractmethod
    def skip(self, field_name: str, obj: Any, local_options: dict[str, Any]) -> bool:
        """Return True to omit the key from the rendered dict."""

    @abstractmethod
    def extract(self, obj: Any, local_options: dict[str, Any]) -> Any:
        """Return the value rendered under name."""

    def __repr__(self) -> str:
        return f"{class_name(self)}({self.name!r})"


class _DeclaredField(Field):
    """
    Common options of declared fields.

    Conditions declared on the field take precedence over the configuration-wide ones.
    With exclude_if_none the value is extracted by skip() as well, so computed values
    run twice for rendered keys.
    """

    def __init__(self,
                 name: str,
                 *,
                 default: Any = UNSET,
                 datetime_format: str | Callable[[Any], Any] | None = None,
                 if_: Condition | None = None,
                 unless: Condition | None = None,
                 exclude_if_none: bool = False,
                 config: Configuration | None = None,
                 ) -> None:
        if not isinstance(name, str) or not name:
            raise TypeError(f"Field name must be a non-empty str, but found {fmt_type(name)}")
        for label, fn in (("if_", if_), ("unless", unless)):
            if fn is not None and not callable(fn):
                raise TypeError(f"{label} must be callable or None, but found {fmt_type(fn)}")
        if datetime_format is not None and not (isinstance(datetime_format, str) or callable(datetime_format)):
            raise InvalidDateTimeFormatError(
                f"datetime_format must be a strftime str or a callable, but found {fmt_type(datetime_format)}")

        self.name = name
        self.default = default
        self.datetime_format = datetime_format
        self.if_ = if_
        self.unless = unless
        self.exclude_if_none = bool(exclude_if_none)
        self.config = config or Configuration.default()

    def skip(self, field_name: str, obj: Any, local_options: dict[str, Any]) -> bool:
        if_ = self.if_ or self.config.if_
        if if_ is not None and not if_(field_name, obj, local_options):
            return True

        unless = self.unless or self.config.unless
        if unless is not None and unless(field_name, obj, local_options):
            return True

        if self.exclude_if_none and self.extract(obj, local_options) is None:
            return True

        return False

    def extract(self, obj: Any, local_options: dict[str, Any]) -> Any:
        value = self._value(obj, local_options)
        if value is None:
            return ifnotunset(self.default, default=self._config_default())
        return self._format(value)

    @abstractmethod
    def _value(self, obj: Any, local_options: dict[str, Any]) -> Any:
        """Return the raw value before defaults and formatting."""

    def _config_default(self) -> Any:
        return self.config.field_default

    def _format(self, value: Any) -> Any:
        fmt = self.datetime_format or self.config.datetime_format
        if fmt is None or not isinstance(value, (dt.date, dt.datetime)):
            return value
        if isinstance(fmt, str):
            return value.strftime(fmt)
        return fmt(value)


class AttributeField(_DeclaredField):
    """
    Field reading `source` from the object.

    Mappings are read by key (a missing key reads as None), other objects by attribute.
    A bound method found under `source` is called without arguments.

    Examples:
        >>> f = AttributeField("title")
        >>> f.extract({"title": "Hello"}, {})
        'Hello'
        >>> AttributeField("headline", source="title").extract({"title": "Hi"}, {})
        'Hi'
    """

    def __init__(self, name: str, source: str | None = None, **kwargs) -> None:
        super().__init__(name, **kwargs)
        self.source = source or name

    def _value(self, obj: Any, local_options: dict[str, Any]) -> Any:
        return read_value(obj, self.source)


class ComputedField(_DeclaredField):
    """
    Field whose value is fn(obj, local_options).

    Examples:
        >>> f = ComputedField("full_name", lambda user, options: f"{user['first']} {user['last']}")
        >>> f.extract({"first": "Ada", "last": "Lovelace"}, {})
        'Ada Lovelace'
    """

    def __init__(self, name: str, fn: Callable[[Any, dict], Any], **kwargs) -> None:
        if not callable(fn):
            raise TypeError(f"fn must be callable, but found {fmt_type(fn)}")
        super().__init__(name, **kwargs)
        self.fn = fn

    def _value(self, obj: Any, local_options: dict[str, Any]) -> Any:
        return self.fn(obj, local_options)


class AssociationField(_DeclaredField):
    """
    Field rendering a related object, or collection, with another blueprint.

    Args:
        name: Output key.
        blueprint: A Renderer instance, or a callable receiving the related value and returning one.
            Classes are rejected, a Blueprint subclass must be instantiated.
        source: Attribute or key holding the related value, defaults to name.
        view: View of the related blueprint to render with.
        fn: Optional callable (obj, local_options) computing the related value instead of source.

    A None related value renders as the field default, else config.association_default.
    Local options are passed on to the related blueprint unchanged.
    """

    def __init__(self,
                 name: str,
                 blueprint: Renderer | Callable[[Any], Renderer],
                 source: str | None = None,
                 *,
                 view: str = Configuration.DEFAULT_VIEW,
                 fn: Callable[[Any, dict], Any] | None = None,
                 **kwargs) -> None:
        if isinstance(blueprint, type) or not (isinstance(blueprint, Renderer) or callable(blueprint)):
            raise InvalidBlueprintError(
                f"Association '{name}' blueprint must be a Renderer instance or a callable returning one, "
                f"but found {_fmt_blueprint(blueprint)}")
        if fn is not None and not callable(fn):
            raise TypeError(f"fn must be callable or None, but found {fmt_type(fn)}")
        super().__init__(name, **kwargs)
        self.blueprint = blueprint
        self.source = source or name
        self.view = view
        self.fn = fn

    def extract(self, obj: Any, local_options: dict[str, Any]) -> Any:
        value = self._value(obj, local_options)
        if value is None:
            return ifnotunset(self.default, default=self._config_default())
        blueprint = self.resolve_blueprint(value)
        return blueprint.hashify(value, self.view, local_options)

    def resolve_blueprint(self, value: Any) -> Renderer:
        """Return the renderer for value, calling a dynamic blueprint selector if needed."""
        blueprint = self.blueprint
        if not isinstance(blueprint, Renderer):
            blueprint = blueprint(value)
        if not isinstance(blueprint, Renderer):
            raise InvalidBlueprintError(
                f"Association '{self.name}' resolved to {fmt_type(blueprint)}, which is not a Renderer")
        return blueprint

    def _value(self, obj: Any, local_options: dict[str, Any]) -> Any:
        if self.fn is not None:
            return self.fn(obj, local_options)
        return read_value(obj, self.source)

    def _config_default(self) -> Any:
        return self.config.association_default


# Methods --------------------------------------------------------------------------------------------------------------

def read_value(obj: Any, source: str) -> Any:
    """
    Read source from obj: mapping key lookup or attribute access.

    Missing mapping keys read as None; missing attributes raise AttributeError.
    """
    if isinstance(obj, abc.Mapping):
        return obj.get(source)
    value = getattr(obj, source)
    if inspect.ismethod(value):
        return value()
    return value


# Private Methods ------------------------------------------------------------------------------------------------------

def _fmt_blueprint(blueprint: Any) -> str:
    if isinstance(blueprint, type):
        return f"class {class_name(blueprint)}, instantiate it first"
    return fmt_type(blueprint)
