"""Built-in sample business dataset for trying the workflow without a file."""

import polars as pl

from .models import SourceFile

SAMPLE_FILENAME = "sample.csv"
SAMPLE_MEDIA_TYPE = "text/csv"

_CATEGORIES = list("ABCDEFGHIJKLMNO")
_SALES = [100, 120, 150, 130, 170, 160, 180, 190, 200, 210, 220, 230, 240, 250, 260]
_PROFIT = [20, 25, 30, 35, 50, 40, 45, 55, 60, 65, 70, 75, 80, 85, 90]
_REGIONS = ["North", "South", "East", "West"]


def sample_frame() -> pl.DataFrame:
    """Sales and profit per category, cycling through four regions."""
    return pl.DataFrame(
        {
            "Category": _CATEGORIES,
            "Sales": _SALES,
            "Profit": _PROFIT,
            "Region": [_REGIONS[i % len(_REGIONS)] for i in range(len(_CATEGORIES))],
        }
    )


def sample_source_file() -> SourceFile:
    """Synthesize the sample dataset as an uploadable CSV file."""
    csv_text = sample_frame().write_csv()
    return SourceFile(
        filename=SAMPLE_FILENAME,
        media_type=SAMPLE_MEDIA_TYPE,
        content=csv_text.encode("utf-8"),
    )
