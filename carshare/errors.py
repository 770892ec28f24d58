"""Typed exceptions for tariff tables, trip input and vendor sources."""


class CarshareError(Exception):
    """Base class for carshare errors."""


class TariffFormatError(CarshareError, ValueError):
    """Raised when an exported tariff table is malformed or incomplete."""


class TripError(CarshareError, ValueError):
    """Raised when trip input cannot be priced."""


class SourceError(CarshareError):
    """Raised for unknown providers or unusable source URLs."""
