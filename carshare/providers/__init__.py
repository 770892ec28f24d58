"""Car-sharing providers with exported tariff tables."""

from .car4way import Car4wayProvider

# Map provider slugs to their pricing classes
PROVIDER_MAP = {
    "car4way": Car4wayProvider,
}


def get_provider(provider_slug: str, **kwargs):
    """Instantiate the provider registered under ``provider_slug``."""
    from ..errors import SourceError

    if provider_slug not in PROVIDER_MAP:
        raise SourceError(f"Unknown provider {provider_slug!r}, known: {sorted(PROVIDER_MAP)}")
    return PROVIDER_MAP[provider_slug](**kwargs)


__all__ = ["Car4wayProvider", "PROVIDER_MAP", "get_provider"]
