from pathlib import Path
from typing import Callable, List, Sequence

import pytest

from carshare.models import TariffKind
from carshare.providers.car4way import load_tariffs

HEADER = [
    "Minutový tarif  (km v ceně)",
    "Legend Fabia",
    "Fancy  Scala, Karoq, Octavia, Caddy Van",
    "Boss Superb / Kodiaq",
]

VALID_ROWS = [
    ["Denní: 6:00 - 20:00 Po-Ne", "6,90", "7,90", "9,90"],
    ["Noční: 20:00 - 6:00 Po-Ne", "4,90", "5,90", "7,90"],
    ["Výhodné balíčky", "", "", ""],
    ["3 hodiny + 50 km", "449", "549", "749"],
    ["Víkend + 200 km", "1 490", "1 790", "2 290"],
    ["Km nad rámec balíčků", "5,90", "", ""],
    ["Letiště Praha - příjezd", "150", "", ""],
    ["Letiště Praha - výjezd", "150", "", ""],
]


@pytest.fixture(scope="session")
def bundled_tariffs():
    return load_tariffs()


@pytest.fixture
def basic(bundled_tariffs):
    return bundled_tariffs[TariffKind.BASIC]


@pytest.fixture
def write_table(tmp_path: Path) -> Callable[..., Path]:
    def _write(rows: Sequence[List[str]], name: str = "basic.tsv",
               header: Sequence[str] = HEADER) -> Path:
        path = tmp_path / name
        lines = ["\t".join(header)] + ["\t".join(row) for row in rows]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
