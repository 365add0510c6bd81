from __future__ import annotations


class CruxError(Exception):
    """Base class for all cruxview errors."""


class LoadError(CruxError):
    """A single load unit failed; the store keeps its previous data."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class TransportError(LoadError):
    """Request failed, returned a non-success status, or timed out."""


class DecodeError(LoadError):
    """Payload is not a readable Arrow stream or lacks the point columns."""


class ColorAttributeError(CruxError):
    def __init__(self, attribute: str, message: str) -> None:
        super().__init__(message)
        self.attribute = attribute


class AttributeMissing(ColorAttributeError):
    def __init__(self, attribute: str) -> None:
        super().__init__(attribute, f"No attribute '{attribute}' found")


class AttributeUnsupported(ColorAttributeError):
    def __init__(self, attribute: str, dtype: object = None) -> None:
        detail = f" of type {dtype}" if dtype is not None else ""
        super().__init__(attribute, f"No color mapping defined for attribute '{attribute}'{detail}")


class DegenerateRange(CruxError):
    def __init__(self, lo: float, hi: float) -> None:
        super().__init__(f"Normalization range [{lo}, {hi}] has zero width")
        self.lo = lo
        self.hi = hi
