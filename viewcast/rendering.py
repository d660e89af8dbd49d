"""
Viewcast Rendering

The Renderer turns an object, or a collection of objects, into dicts shaped by a named
view, optionally wrapped in a root/meta envelope, and encodes the result to JSON.

Rendering pipeline:
    1. Resolve the view name from the 'view' option, "default" if missing
    2. Check the view is defined, before any hook or field runs
    3. Run the extensions' pre_render hook, which may replace the object
    4. Convert each item of a collection, or the single object, to a dict
    5. Apply the view's transformers to each dict
    6. Wrap the result under 'root', adding 'meta' if given
    7. Encode to JSON (render() only)
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging

from enum import Enum
from typing import Any, Protocol, Sequence

# Local ----------------------------------------------------------------------------------------------------------------
from .config import Configuration
from .errors import InvalidRootError, MetaRequiresRootError, UndefinedViewError
from .jsonify import as_json
from .tools import class_name, fmt_type

logger = logging.getLogger(__name__)

DEFAULT_VIEW = Configuration.DEFAULT_VIEW
META_KEY = "meta"


# Classes --------------------------------------------------------------------------------------------------------------

class ViewResolver(Protocol):
    """What the renderer needs from a view collection."""

    def is_view(self, name: Any) -> bool: ...

    def fields_for(self, name: str) -> Sequence[Any]: ...

    def transformers(self, name: str) -> Sequence[Any]: ...


class Renderer:
    """
    Renders objects through the views of a view collection.

    A renderer is stateless between calls: the output is a function of its configuration,
    its views, the object and the render options.

    Args:
        view_collection: Resolves view names to fields and transformers, see ViewResolver.
        config: Configuration to render with; Configuration.default() if None.
        name: Name used in logs and repr, the class name if None.

    Render Options:
        view: Name of the view to render, "default" if missing.
        root: str or Enum key to nest the output under, optional.
        meta: Any value but None added under "meta" next to root, requires root. Falsy values
            such as False, 0 or {} count as given.
        Any other option is passed, together with root and meta, as local options to fields,
        conditions, transformers and extensions.
    """

    def __init__(self,
                 view_collection: ViewResolver,
                 config: Configuration | None = None,
                 name: str | None = None,
                 ) -> None:
        if not isinstance(config, (Configuration, type(None))):
            raise TypeError(f"config must be a Configuration instance, but found {fmt_type(config)}")
        self.view_collection = view_collection
        self.config = self._bind_config(view_collection, config)
        self.name = name or class_name(self)

    # Public API -----------------------------------

    def render(self, obj: Any, **options: Any) -> str:
        """
        Render obj to a JSON str.

        Examples:
            >>> posts.render(post, view="extended")
            '{"id": 1, "title": "Hello", "body": "..."}'
            >>> posts.render([post], root="posts", meta={"total": 1})
            '{"posts": [{"id": 1, "title": "Hello"}], "meta": {"total": 1}}'

        Raises:
            UndefinedViewError: If the view is not defined.
            InvalidRootError: If root is not a str or Enum.
            MetaRequiresRootError: If meta is given without root.
        """
        return self.config.jsonify(self.render_as_hash(obj, **options))

    def render_as_hash(self, obj: Any, **options: Any) -> dict | list:
        """
        Render obj to a dict, or a list of dicts for collections, without JSON encoding.

        Raises:
            UndefinedViewError: If the view is not defined.
            InvalidRootError: If root is not a str or Enum.
            MetaRequiresRootError: If meta is given without root.
        """
        view_name = options.get("view", DEFAULT_VIEW)
        local_options = {k: v for k, v in options.items() if k != "view"}

        data = self.hashify(obj, view_name, local_options)
        root, meta = self.handle_root_and_meta(options)
        return self.prepend_root_and_meta(data, root, meta)

    render_as_dict = render_as_hash

    def render_as_json(self, obj: Any, **options: Any) -> Any:
        """
        Render obj to a JSON-compatible value tree: dict, list, str, int, float, bool and None only.

        Values are normalized with viewcast.jsonify.as_json() and the configuration's
        json_options, e.g. datetimes become ISO 8601 strings and sets become lists.
        """
        return as_json(self.render_as_hash(obj, **options), self.config.json_options)

    def hashify(self, obj: Any, view_name: str = DEFAULT_VIEW, local_options: dict[str, Any] | None = None) -> Any:
        """
        Convert obj to a dict, or a list of dicts, using the fields of view_name.

        This is also the entry point used by associations to render related objects.

        Raises:
            UndefinedViewError: If view_name is not defined. Raised before extensions run.
        """
        if not self.view_collection.is_view(view_name):
            raise UndefinedViewError(view_name, f"View '{view_name}' is not defined in {self.name}")

        local_options = {} if local_options is None else local_options
        logger.debug(f"{self.name}: rendering {fmt_type(obj)} with view '{view_name}'")

        obj = self.config.extensions.pre_render(obj, self, view_name, local_options)
        return self.prepare_data(obj, view_name, local_options)

    # Pipeline Steps -------------------------------

    def prepare_data(self, obj: Any, view_name: str, local_options: dict[str, Any]) -> Any:
        """Return a list of dicts for collection-like obj, a single dict otherwise."""
        if self.config.is_array_like(obj):
            return [self.object_to_hash(item, view_name, local_options) for item in obj]
        return self.object_to_hash(obj, view_name, local_options)

    def object_to_hash(self, obj: Any, view_name: str, local_options: dict[str, Any]) -> dict[str, Any]:
        """
        Convert a single object to a dict: fields in view order, then transformers in view order.

        A skipped field leaves no key at all. Errors raised by fields, conditions and
        transformers propagate unchanged.
        """
        data: dict[str, Any] = {}
        for field in self.view_collection.fields_for(view_name):
            if field.skip(field.name, obj, local_options):
                continue
            data[field.name] = field.extract(obj, local_options)

        for transformer in self.view_collection.transformers(view_name):
            transformer.transform(data, obj, local_options)

        return data

    @staticmethod
    def handle_root_and_meta(options: dict[str, Any]) -> tuple[str | Enum | None, Any]:
        """
        Return validated (root, meta) from render options.

        The root type is checked before the meta-requires-root rule.

        Raises:
            InvalidRootError: If root is neither None, a str nor an Enum.
            MetaRequiresRootError: If meta is not None while root is None.
        """
        root = options.get("root")
        meta = options.get(META_KEY)

        if root is None or isinstance(root, (str, Enum)):
            if root is None and meta is not None:
                raise MetaRequiresRootError("meta requires a root to be passed")
            return root, meta

        raise InvalidRootError(f"root should be one of str, Enum or None, but found {fmt_type(root)}")

    @staticmethod
    def prepend_root_and_meta(data: Any, root: str | Enum | None, meta: Any) -> Any:
        """
        Return data nested under root, with meta beside it; data itself if root is None.

        Examples:
            >>> Renderer.prepend_root_and_meta([{"id": 1}], "posts", {"total": 1})
            {'posts': [{'id': 1}], 'meta': {'total': 1}}
        """
        if root is None:
            return data

        envelope = {root: data}
        if meta is not None:
            envelope[META_KEY] = meta
        return envelope

    def __repr__(self) -> str:
        return f"{class_name(self)}(name={self.name!r})"

    # Private Methods ------------------------------

    @staticmethod
    def _bind_config(view_collection: ViewResolver, config: Configuration | None) -> Configuration:
        """
        Return the configuration shared by the renderer and its view collection.

        A view collection exposing a `config` attribute is bound to the renderer's
        configuration when it has none; the renderer adopts the collection's one when
        it is given none itself.

        Raises:
            ValueError: If both carry a configuration and they are different objects.
        """
        if not hasattr(view_collection, "config"):
            return config or Configuration.default()

        bound = view_collection.config
        if config is None:
            config = bound or Configuration.default()
        elif bound is not None and bound is not config:
            raise ValueError("view_collection is bound to another Configuration, "
                             "pass the same config to both or build the view collection without one")
        view_collection.config = config
        return config
