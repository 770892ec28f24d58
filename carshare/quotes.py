"""
Trip quotes across providers.
Collects every price option of the enabled providers, cheapest first.
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from .base_provider import BaseProvider
from .models import CarType, PriceOption, TripInput

logger = logging.getLogger(__name__)

QUOTE_COLUMNS = ["provider", "tariff", "car_type", "option", "czk", "notes"]


def _sort_key(option: PriceOption):
    return (option.czk, option.provider, CarType(option.car_type), option.option)


def quote(trip: TripInput, providers: Iterable[BaseProvider]) -> List[PriceOption]:
    """Price ``trip`` with every enabled provider."""
    options = []
    for provider in providers:
        if not provider.enabled:
            logger.debug(f"Skipping disabled provider {provider.name}")
            continue
        provider_options = provider.calculate(trip)
        logger.info(f"{provider.name}: {len(provider_options)} options")
        options.extend(provider_options)
    return sorted(options, key=_sort_key)


def cheapest(options: List[PriceOption]) -> Optional[PriceOption]:
    return min(options, key=_sort_key) if options else None


def options_frame(options: List[PriceOption]) -> pd.DataFrame:
    """Options as a DataFrame for display or CSV export."""
    return pd.DataFrame([option.to_dict() for option in options], columns=QUOTE_COLUMNS)
