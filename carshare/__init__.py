"""
Car-sharing Tariffs - Exported Price Tables & Trip Quotes
=========================================================

Loads the tariff tables exported by hand from the vendor price-list PDF
and prices trips against them. Also keeps the vendor URL registry and
checks that the exported files are still in place.

Usage:
    carshare quote --km 25 --begin 2026-10-16T18:00 --end 2026-10-16T21:30
"""

__version__ = "0.1.0"
