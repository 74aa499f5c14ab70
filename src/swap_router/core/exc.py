"""
Core exception types for swap_router.

These are dependency-free and may be imported by all modules.
"""

__all__ = [
    "SwapRouterError",
    "ValidationError",
    "SimulationError",
    "NoVenueAvailable",
    "AmbiguousSelection",
    "TransportError",
]


class SwapRouterError(Exception):
    """Base class for every error raised by the engine."""
    pass


class ValidationError(SwapRouterError):
    """Raised when a trade intent field fails validation.

    Attributes
    ----------
    field : str
        Intent field that failed ("input", "slippage", "from", "to").
    message : str
        Human-oriented reason, suitable for a form hint.
    """

    def __init__(self, field, message):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class SimulationError(SwapRouterError):
    """Raised (or reported) when one venue's quote transport call failed.

    A failing venue never aborts the simulation of the other venues; the
    batch surfaces the first of these alongside the quotes that succeeded.
    """

    def __init__(self, venue, cause):
        super().__init__(f"{venue} simulation failed: {cause}")
        self.venue = venue
        self.cause = cause


class NoVenueAvailable(SwapRouterError):
    """Raised when no venue can execute the requested pair."""

    def __init__(self, from_asset, to_asset):
        super().__init__(f"No venue available for {from_asset} -> {to_asset}")
        self.from_asset = from_asset
        self.to_asset = to_asset


class AmbiguousSelection(SwapRouterError):
    """Raised when settlement is requested while several venues qualify and none was chosen."""

    def __init__(self, venues):
        names = ", ".join(str(v) for v in venues)
        super().__init__(f"Venue must be chosen explicitly among: {names}")
        self.venues = tuple(venues)


class TransportError(SwapRouterError):
    """Raised by a quote transport when the remote call fails or returns a malformed payload."""
    pass
