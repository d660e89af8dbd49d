"""
Viewcast Views

A View is a named, ordered set of fields plus an ordered set of transformers. Views of one
blueprint live in a ViewCollection, which always holds two views:

    identifier: fields rendered first in every view
    default: fields and transformers inherited by every other view

Any other view adds its own declarations on top of default, and may include further views
and exclude inherited fields.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .config import Configuration, SORT_BY_NAME_ASC
from .errors import InvalidViewError, UndefinedViewError
from .fields import Field
from .tools import fmt_names, fmt_type

logger = logging.getLogger(__name__)

IDENTIFIER_VIEW = Configuration.IDENTIFIER_VIEW
DEFAULT_VIEW = Configuration.DEFAULT_VIEW


# Classes --------------------------------------------------------------------------------------------------------------

class View:
    """
    Declarations of a single view.

    Attributes:
        name: View name.
        fields: Fields keyed by output name, in declaration order. Re-declaring a name
            replaces the field but keeps its original position.
        transformers: Transformers in declaration order.
        included_views: Names of views whose declarations this view inherits, in order.
        excluded_fields: Output names removed from the inherited fields.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.fields: dict[str, Field] = {}
        self.transformers: list[Any] = []
        self.included_views: list[str] = []
        self.excluded_fields: set[str] = set()

    def add_field(self, field: Field) -> "View":
        if not isinstance(field, Field):
            raise TypeError(f"field must be a Field instance, but found {fmt_type(field)}")
        self.fields[field.name] = field
        return self

    def add_transformer(self, transformer: Any) -> "View":
        if not callable(getattr(transformer, "transform", None)):
            raise TypeError(f"transformer must implement transform(), but found {fmt_type(transformer)}")
        self.transformers.append(transformer)
        return self

    def include_view(self, name: str) -> "View":
        if name == self.name:
            raise InvalidViewError(f"View '{self.name}' cannot include itself")
        if name not in self.included_views:
            self.included_views.append(name)
        return self

    def exclude_field(self, name: str) -> "View":
        self.excluded_fields.add(name)
        return self

    def __repr__(self) -> str:
        return f"View({self.name!r}, fields={list(self.fields)!r})"


class ViewCollection:
    """
    Resolves view names to the ordered fields and transformers rendered for them.

    Examples:
        >>> from viewcast.fields import AttributeField
        >>> views = ViewCollection()
        >>> _ = views.view("identifier").add_field(AttributeField("id"))
        >>> _ = views.view("default").add_field(AttributeField("title"))
        >>> _ = views.view("extended").add_field(AttributeField("body"))
        >>> [f.name for f in views.fields_for("extended")]
        ['id', 'title', 'body']
    """

    def __init__(self, config: Configuration | None = None) -> None:
        # None until bound by a Renderer; resolution then falls back to Configuration.default()
        self.config = config
        self.views: dict[str, View] = {
            IDENTIFIER_VIEW: View(IDENTIFIER_VIEW),
            DEFAULT_VIEW: View(DEFAULT_VIEW),
        }

    def view(self, name: str) -> View:
        """Return the view called name, creating it on first use."""
        if not isinstance(name, str) or not name:
            raise TypeError(f"View name must be a non-empty str, but found {fmt_type(name)}")
        if name not in self.views:
            self.views[name] = View(name)
            logger.debug(f"Declared view '{name}'")
        return self.views[name]

    def is_view(self, name: Any) -> bool:
        """Return True if name is a defined view."""
        return isinstance(name, str) and name in self.views

    def names(self) -> list[str]:
        return list(self.views)

    def fields_for(self, name: str) -> list[Field]:
        """
        Return the fields rendered by view name, in output order.

        Identifier fields come first. The rest are gathered from the default view, the
        included views (recursively) and the view itself, later declarations of a name
        overriding earlier ones, excluded names removed. They keep declaration order or
        are sorted by name, as configured by sort_fields_by.

        Raises:
            UndefinedViewError: If name or any view it includes is not defined.
            InvalidViewError: If views include each other.
        """
        self._require(name)
        identifier_fields = list(self.views[IDENTIFIER_VIEW].fields.values())
        if name == IDENTIFIER_VIEW:
            return identifier_fields

        gathered: dict[str, Field] = {}
        excluded: set[str] = set()
        for view in self._lineage(name):
            gathered.update(view.fields)
            excluded |= view.excluded_fields

        identifier_names = {f.name for f in identifier_fields}
        fields = [f for n, f in gathered.items() if n not in excluded and n not in identifier_names]
        if self._config().sort_fields_by == SORT_BY_NAME_ASC:
            fields.sort(key=lambda f: f.name)
        return identifier_fields + fields

    def transformers(self, name: str) -> list[Any]:
        """
        Return the transformers of view name, in application order.

        Default view transformers run first, then those of included views and of the view
        itself. Each transformer appears once. A view with no transformers at all gets
        the configuration's default_transformers.
        """
        self._require(name)
        if name == IDENTIFIER_VIEW:
            lineage = [self.views[DEFAULT_VIEW], self.views[IDENTIFIER_VIEW]]
        else:
            lineage = self._lineage(name)

        result: list[Any] = []
        for view in lineage:
            for t in view.transformers:
                if not any(t is r for r in result):
                    result.append(t)
        return result or list(self._config().default_transformers)

    def __contains__(self, name: Any) -> bool:
        return self.is_view(name)

    def __iter__(self) -> Iterator[View]:
        return iter(self.views.values())

    def __len__(self) -> int:
        return len(self.views)

    # Private Methods ----------------------------------

    def _config(self) -> Configuration:
        return self.config or Configuration.default()

    def _require(self, name: Any) -> None:
        if not self.is_view(name):
            raise UndefinedViewError(
                name, f"View '{name}' is not defined. Defined views: {fmt_names(self.views)}")

    def _lineage(self, name: str) -> list[View]:
        """Return default view, included views depth-first and the view itself, without repeats."""
        lineage: list[View] = []
        self._collect(DEFAULT_VIEW, lineage, path=())
        if name != DEFAULT_VIEW:
            self._collect(name, lineage, path=())
        return lineage

    def _collect(self, name: str, lineage: list[View], path: tuple[str, ...]) -> None:
        if name in path:
            cycle = " -> ".join(path + (name,))
            raise InvalidViewError(f"Views include each other: {cycle}")
        self._require(name)
        view = self.views[name]
        for included in view.included_views:
            self._collect(included, lineage, path + (name,))
        if view not in lineage:
            lineage.append(view)
