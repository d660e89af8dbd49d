"""
Viewcast Configuration

Each renderer holds an explicit Configuration value. Renderers created without one take
the process default from Configuration.default() at construction time.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import logging

from dataclasses import dataclass, field, replace as dataclasses_replace
from typing import Any, Callable, ClassVar, Iterable

# Local ----------------------------------------------------------------------------------------------------------------
from .extensions import Extensions
from .jsonify import JsonifyOptions, dumps
from .tools import fmt_type, fmt_value

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------

SORT_BY_DEFINITION = "definition"
SORT_BY_NAME_ASC = "name_asc"
SORT_FIELDS_BY = (SORT_BY_DEFINITION, SORT_BY_NAME_ASC)

_default_config: "Configuration | None" = None


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass
class Configuration:
    """
    Render-time defaults and collaborators shared by renderers.

    Attributes:
        generator: Callable encoding a value tree to a JSON str, used by Renderer.render().
            None selects viewcast.jsonify.dumps() with json_options.
        json_options: JSON-safe normalization options of render_as_json() and the default generator.
        extensions: Registry of render extensions invoked before each object is converted.
        field_default: Value rendered by fields whose extracted value is None.
        association_default: Value rendered by associations whose extracted value is None.
        datetime_format: strftime pattern or callable applied to date/datetime field values.
        if_: Condition (field_name, obj, local_options) -> bool; fields render only when true.
        unless: Condition (field_name, obj, local_options) -> bool; fields are skipped when true.
        sort_fields_by: "definition" keeps declaration order, "name_asc" sorts by field name.
            Identifier fields always come first.
        default_transformers: Transformers applied to views which declare none.
        array_like_classes: Extra types always rendered as collections.

    Examples:
        >>> config = Configuration(field_default="n/a", sort_fields_by="name_asc")
        >>> strict = config.merge(unless=lambda name, obj, options: name.startswith("secret"))
    """
    generator: Callable[[Any], str] | None = None
    json_options: JsonifyOptions = field(default_factory=JsonifyOptions)
    extensions: Extensions = field(default_factory=Extensions)

    field_default: Any = None
    association_default: Any = None
    datetime_format: str | Callable[[Any], Any] | None = None

    if_: Callable[[str, Any, dict], bool] | None = None
    unless: Callable[[str, Any, dict], bool] | None = None

    sort_fields_by: str = SORT_BY_DEFINITION
    default_transformers: list[Any] = field(default_factory=list)
    array_like_classes: tuple[type, ...] = ()

    DEFAULT_VIEW: ClassVar[str] = "default"
    IDENTIFIER_VIEW: ClassVar[str] = "identifier"

    def __post_init__(self) -> None:
        if self.generator is not None and not callable(self.generator):
            raise TypeError(f"generator must be callable or None, but found {fmt_type(self.generator)}")
        if not isinstance(self.json_options, JsonifyOptions):
            raise TypeError(f"json_options must be a JsonifyOptions instance, but found {fmt_type(self.json_options)}")
        if not isinstance(self.extensions, Extensions):
            self.extensions = Extensions(self.extensions)
        for name in ("if_", "unless"):
            fn = getattr(self, name)
            if fn is not None and not callable(fn):
                raise TypeError(f"{name} must be callable or None, but found {fmt_type(fn)}")
        if self.datetime_format is not None and not (isinstance(self.datetime_format, str)
                                                     or callable(self.datetime_format)):
            raise TypeError(f"datetime_format must be a str or callable, but found {fmt_type(self.datetime_format)}")
        if self.sort_fields_by not in SORT_FIELDS_BY:
            raise ValueError(f"sort_fields_by must be one of {SORT_FIELDS_BY}, "
                             f"but found {fmt_value(self.sort_fields_by)}")
        self.default_transformers = list(self.default_transformers)
        for t in self.default_transformers:
            if not callable(getattr(t, "transform", None)):
                raise TypeError(f"default_transformers items must implement transform(), but found {fmt_type(t)}")
        self.array_like_classes = _as_type_tuple(self.array_like_classes)

    # Class Methods ------------------------------------

    @classmethod
    def default(cls) -> "Configuration":
        """Return the process default configuration, creating it on first use."""
        global _default_config
        if _default_config is None:
            _default_config = cls()
        return _default_config

    @classmethod
    def set_default(cls, config: "Configuration") -> "Configuration":
        """Replace the process default configuration; affects renderers created afterwards."""
        global _default_config
        if not isinstance(config, Configuration):
            raise TypeError(f"config must be a Configuration instance, but found {fmt_type(config)}")
        _default_config = config
        logger.debug("Default viewcast configuration replaced")
        return config

    @classmethod
    def reset_default(cls) -> None:
        """Drop the process default configuration, the next default() call creates a fresh one."""
        global _default_config
        _default_config = None

    # Methods ------------------------------------------

    def jsonify(self, value: Any) -> str:
        """
        Encode a rendered value tree to a JSON str.

        Without a custom generator the tree is normalized with json_options and encoded by
        viewcast.jsonify.dumps(). A custom generator receives the tree as rendered.
        """
        if self.generator is None:
            return dumps(value, self.json_options)
        return self.generator(value)

    def is_array_like(self, obj: Any) -> bool:
        """
        Return True if obj should render as a collection of entities.

        Instances of array_like_classes always do. Otherwise obj must be sized and iterable,
        and not a mapping, text, bytes or namedtuple; those render as single entities.
        Empty collections are collection-like.
        """
        if self.array_like_classes and isinstance(obj, self.array_like_classes):
            return True
        if isinstance(obj, (str, bytes, bytearray, memoryview, abc.Mapping)):
            return False
        if isinstance(obj, tuple) and hasattr(obj, "_fields"):
            return False
        return _is_sized_iterable(obj)

    def merge(self, **kwargs) -> "Configuration":
        """
        Return a copy with the given attributes replaced.

        The extensions registry and the json_options type handlers are copied, so registering
        extensions or type handlers on the result does not affect this configuration.
        """
        kwargs.setdefault("extensions", self.extensions.copy())
        kwargs.setdefault("json_options", self.json_options.copy())
        return dataclasses_replace(self, **kwargs)


# Private Methods ------------------------------------------------------------------------------------------------------

def _as_type_tuple(types: type | Iterable[type]) -> tuple[type, ...]:
    if isinstance(types, type):
        types = (types,)
    types = tuple(types)
    for t in types:
        if not isinstance(t, type):
            raise TypeError(f"array_like_classes items must be types, but found {fmt_type(t)}")
    return types


def _is_sized_iterable(obj: Any) -> bool:
    """
    Returns True if obj implements both __iter__ and __len__.

    Tries to iterate and to get length, does not rely on plain type checks.
    """
    if not isinstance(obj, abc.Sized):
        return False
    try:
        iter(obj)
        len(obj)
    except TypeError:
        return False
    return True
