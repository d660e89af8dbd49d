"""
Viewcast exceptions raised by the rendering pipeline and view declarations.

Every error derives from ViewcastError and from the builtin exception type that best
describes it, so callers can catch either the library base class or the builtin one.
"""


# Classes --------------------------------------------------------------------------------------------------------------

class ViewcastError(Exception):
    """Base class for all viewcast errors."""


class UndefinedViewError(ViewcastError, KeyError):
    """Requested view name has no definition."""

    def __init__(self, view_name, message: str | None = None) -> None:
        self.view_name = view_name
        super().__init__(message or f"View '{view_name}' is not defined")

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable
        return str(self.args[0])


class InvalidRootError(ViewcastError, TypeError):
    """Render root is neither a str nor an Enum identifier."""


class MetaRequiresRootError(ViewcastError, ValueError):
    """Render meta was passed without a root."""


class InvalidBlueprintError(ViewcastError, TypeError):
    """Association points to something that cannot render."""


class InvalidViewError(ViewcastError, ValueError):
    """View declaration cannot be resolved, e.g. views include each other."""


class InvalidDateTimeFormatError(ViewcastError, TypeError):
    """Field datetime_format is neither a strftime pattern nor a callable."""
