class SpritePipelineError(Exception):
    """Base class for every error raised by the sprite pipeline."""


class FetchError(SpritePipelineError):
    """Raw bytes for a locator could not be retrieved."""


class AssetNotFoundError(FetchError):
    """The locator points at nothing (missing file, HTTP 404)."""


class DecodeError(SpritePipelineError):
    """
    Fetching or decoding failed for every variant that was tried.
    The last underlying failure is chained as ``__cause__``.
    """

    def __init__(self, locator: str, message: str | None = None):
        self.locator = locator
        super().__init__(message or f"Could not load image: {locator}")


class EncodeError(SpritePipelineError):
    """A bitmap could not be materialised into an owned buffer or encoded bytes."""
