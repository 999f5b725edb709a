"""
Recoverable navigation conditions. None of these stop the session; they are
turned into status values that tell the user why guidance is unavailable.
"""


class NavigationError(Exception):
    """Base class for every condition reported by the navigation engine."""


class ConfigurationMissing(NavigationError):
    """World-to-floor projection requested before its parameters were loaded."""


class IncompleteState(NavigationError):
    """Guidance requested without both a start and a destination position."""


class HeadingUnavailable(NavigationError):
    """Guidance requested before any heading sample was accepted."""


class SensorUnsupported(NavigationError):
    """The platform offers no orientation events at all."""


class PermissionDenied(NavigationError):
    """The user or platform refused orientation access, or the request failed."""


class SensorSilent(NavigationError):
    """Subscribed and granted, but no orientation sample arrived in time."""


class NoUsableHeadingField(NavigationError):
    """An orientation sample carried none of the recognised heading fields."""


class UnknownRoom(NavigationError, KeyError):
    """A room id that is not part of the loaded floor."""
