"""
Render lifecycle extensions.

An extension hooks into rendering before any field is extracted. Its pre_render() may
return the object unchanged, a transformed copy or an entirely different object; the
renderer continues with whatever the last extension returned.

Example:
    >>> class Preload(Extension):
    ...     def pre_render(self, obj, blueprint, view_name, local_options):
    ...         return obj.with_related() if hasattr(obj, "with_related") else obj
    >>> extensions = Extensions([Preload()])
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging
from typing import Any, Iterable, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .tools import class_name, fmt_type

logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------

class Extension:
    """
    Base class for render extensions.

    Subclasses override the hooks they need, every hook defaults to a no-op.
    """

    def pre_render(self, obj: Any, blueprint: Any, view_name: str, local_options: dict[str, Any]) -> Any:
        """
        Called once per hashify() call before the object is converted.

        Args:
            obj: The object passed to render, or the previous extension's result.
            blueprint: The renderer performing the render.
            view_name: The resolved view name.
            local_options: Render options without 'view'.

        Returns:
            The object to render.
        """
        return obj

    def __repr__(self) -> str:
        return f"{class_name(self)}()"


class Extensions:
    """
    Ordered registry of render extensions.

    Dispatches each hook through all registered extensions in registration order.
    """

    def __init__(self, extensions: Iterable[Extension] = ()) -> None:
        self._extensions: list[Extension] = []
        for ext in extensions:
            self.add(ext)

    def add(self, extension: Extension) -> "Extensions":
        """
        Register an extension.

        Returns:
            Self, to allow chaining.

        Raises:
            TypeError: If extension is not an Extension instance.
        """
        if not isinstance(extension, Extension):
            raise TypeError(f"extension must be an Extension instance, but found {fmt_type(extension)}")
        self._extensions.append(extension)
        logger.debug(f"Registered render extension {class_name(extension)}")
        return self

    def pre_render(self, obj: Any, blueprint: Any, view_name: str, local_options: dict[str, Any]) -> Any:
        """Thread obj through every extension's pre_render() and return the final object."""
        for ext in self._extensions:
            obj = ext.pre_render(obj, blueprint, view_name, local_options)
        return obj

    def to_list(self) -> list[Extension]:
        """Return registered extensions as a new list."""
        return list(self._extensions)

    def copy(self) -> "Extensions":
        return Extensions(self._extensions)

    def __iter__(self) -> Iterator[Extension]:
        return iter(self._extensions)

    def __len__(self) -> int:
        return len(self._extensions)

    def __repr__(self) -> str:
        return f"Extensions({self._extensions!r})"
