"""
Error taxonomy for the parallels engine.

The HTTP layer maps each class to a status code; the engine itself never
catches these.
"""


class ParallelsError(Exception):
    """Base class for engine errors"""
    status_code = 500


class InvalidInputError(ParallelsError):
    """Malformed request input (e.g. a non-numeric myth id)"""
    status_code = 400


class NotFoundError(ParallelsError):
    """Source myth is not present in the current corpus snapshot"""
    status_code = 404


class UpstreamError(ParallelsError):
    """The myth store could not be reached or failed a query"""
    status_code = 502


class SuggestionTimeoutError(ParallelsError):
    """A suggestion request exceeded its time budget"""
    status_code = 504
