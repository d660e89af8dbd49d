"""
Viewcast Blueprints

A Blueprint is a Renderer that declares its own views. Declarations made on the blueprint
itself go to the default view; view(name) returns a builder for any other view.

Examples:
    >>> author = Blueprint("author").identifier("id").field("name")
    >>> posts = (
    ...     Blueprint("post")
    ...     .identifier("id")
    ...     .fields("title", "created_at")
    ...     .association("author", author)
    ... )
    >>> with posts.view("extended") as v:
    ...     v.field("body")
    ...     v.field("word_count", lambda post, options: len(post.body.split()))
    >>> posts.render_as_hash(post, view="extended")
    {'id': 1, 'title': 'Hello', 'created_at': ..., 'author': {...}, 'body': '...', 'word_count': 3}
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .config import Configuration
from .fields import AssociationField, AttributeField, ComputedField, Field
from .rendering import Renderer
from .transformers import FunctionTransformer, Transformer
from .tools import fmt_type
from .views import DEFAULT_VIEW, IDENTIFIER_VIEW, View, ViewCollection


# Classes --------------------------------------------------------------------------------------------------------------

class ViewBuilder:
    """
    Chainable declarations for one view of a blueprint.

    Can be used as a context manager to group the declarations of a view.
    """

    def __init__(self, blueprint: "Blueprint", name: str) -> None:
        self.blueprint = blueprint
        self.view: View = blueprint.view_collection.view(name)

    @property
    def name(self) -> str:
        return self.view.name

    def field(self,
              name: str,
              fn: Callable[[Any, dict], Any] | None = None,
              *,
              source: str | None = None,
              **kwargs) -> "ViewBuilder":
        """
        Declare a field.

        Args:
            name: Output key.
            fn: Callable (obj, local_options) computing the value; the value is read from
                source otherwise.
            source: Attribute or mapping key to read, defaults to name.
            **kwargs: default, datetime_format, if_, unless, exclude_if_none.
        """
        if fn is not None and source is not None:
            raise TypeError(f"Field '{name}' takes either fn or source, not both")
        config = self.blueprint.config
        if fn is not None:
            field = ComputedField(name, fn, config=config, **kwargs)
        else:
            field = AttributeField(name, source, config=config, **kwargs)
        self.view.add_field(field)
        return self

    def fields(self, *names: str) -> "ViewBuilder":
        """Declare several attribute fields with default options."""
        for name in names:
            self.field(name)
        return self

    def add_field(self, field: Field) -> "ViewBuilder":
        """Declare a custom Field implementation."""
        self.view.add_field(field)
        return self

    def association(self,
                    name: str,
                    blueprint: Renderer | Callable[[Any], Renderer],
                    fn: Callable[[Any, dict], Any] | None = None,
                    *,
                    source: str | None = None,
                    view: str = DEFAULT_VIEW,
                    **kwargs) -> "ViewBuilder":
        """
        Declare a field rendering a related object, or collection, with another blueprint.

        Args:
            name: Output key.
            blueprint: Renderer of the related object, or a callable returning one for a value.
            fn: Callable (obj, local_options) computing the related object instead of source.
            source: Attribute or mapping key holding the related object, defaults to name.
            view: View of blueprint used for the related object.
            **kwargs: default, if_, unless, exclude_if_none.
        """
        field = AssociationField(name, blueprint, source, view=view, fn=fn, config=self.blueprint.config, **kwargs)
        self.view.add_field(field)
        return self

    def transform(self, transformer: Transformer | type | Callable[[dict, Any, dict], Any]) -> "ViewBuilder":
        """
        Append a transformer: a Transformer instance, a Transformer subclass (instantiated
        without arguments) or a plain callable (data, obj, local_options).
        """
        if isinstance(transformer, type):
            if not issubclass(transformer, Transformer):
                raise TypeError(f"transformer class must derive from Transformer, but found {fmt_type(transformer)}")
            transformer = transformer()
        elif not callable(getattr(transformer, "transform", None)):
            transformer = FunctionTransformer(transformer)
        self.view.add_transformer(transformer)
        return self

    def include_view(self, *names: str) -> "ViewBuilder":
        """Inherit the declarations of other views."""
        for name in names:
            self.view.include_view(name)
        return self

    include_views = include_view

    def exclude(self, *names: str) -> "ViewBuilder":
        """Remove inherited fields from this view."""
        for name in names:
            self.view.exclude_field(name)
        return self

    def __enter__(self) -> "ViewBuilder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def __repr__(self) -> str:
        return f"ViewBuilder({self.blueprint.name!r}, {self.name!r})"


class Blueprint(Renderer):
    """
    Renderer with a chainable view declaration API.

    Declaration methods called on the blueprint apply to the default view, except
    identifier() which declares fields of the identifier view, rendered first in every view.

    Args:
        name: Name used in logs, repr and error messages.
        config: Configuration to declare and render with; Configuration.default() if None.
    """

    def __init__(self, name: str | None = None, *, config: Configuration | None = None) -> None:
        if not isinstance(config, (Configuration, type(None))):
            raise TypeError(f"config must be a Configuration instance, but found {fmt_type(config)}")
        config = config or Configuration.default()
        super().__init__(ViewCollection(config), config=config, name=name)
        self._default = ViewBuilder(self, DEFAULT_VIEW)
        self._identifier = ViewBuilder(self, IDENTIFIER_VIEW)

    def identifier(self,
                   name: str,
                   fn: Callable[[Any, dict], Any] | None = None,
                   *,
                   source: str | None = None,
                   **kwargs) -> "Blueprint":
        """Declare an identifier field, see ViewBuilder.field()."""
        self._identifier.field(name, fn, source=source, **kwargs)
        return self

    def field(self,
              name: str,
              fn: Callable[[Any, dict], Any] | None = None,
              *,
              source: str | None = None,
              **kwargs) -> "Blueprint":
        """Declare a default view field, see ViewBuilder.field()."""
        self._default.field(name, fn, source=source, **kwargs)
        return self

    def fields(self, *names: str) -> "Blueprint":
        self._default.fields(*names)
        return self

    def add_field(self, field: Field) -> "Blueprint":
        self._default.add_field(field)
        return self

    def association(self,
                    name: str,
                    blueprint: Renderer | Callable[[Any], Renderer],
                    fn: Callable[[Any, dict], Any] | None = None,
                    *,
                    source: str | None = None,
                    view: str = DEFAULT_VIEW,
                    **kwargs) -> "Blueprint":
        """Declare a default view association, see ViewBuilder.association()."""
        self._default.association(name, blueprint, fn, source=source, view=view, **kwargs)
        return self

    def transform(self, transformer: Transformer | type | Callable[[dict, Any, dict], Any]) -> "Blueprint":
        """Append a default view transformer, applied in every view."""
        self._default.transform(transformer)
        return self

    def exclude(self, *names: str) -> "Blueprint":
        self._default.exclude(*names)
        return self

    def view(self, name: str) -> ViewBuilder:
        """Return the builder of view name, declaring the view on first use."""
        return ViewBuilder(self, name)

    def views(self) -> list[str]:
        """Names of the declared views, identifier and default included."""
        return self.view_collection.names()
