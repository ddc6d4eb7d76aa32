from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pandas as pd
import requests

from footprint.factors import INITIAL_MATERIAL_DB, MaterialFactor

# Material factor sheet published as CSV (File > Share > Publish to web, or /export?format=csv).
# Columns by position: 1 name, 2 factor, 3 numerator unit, 5 denominator unit.
_NAME_COL = 1
_FACTOR_COL = 2
_UNIT1_COL = 3
_UNIT2_COL = 5

logger = logging.getLogger(__name__)

FETCH_WARNING = "Could not reach the material factor sheet; using the built-in material table."


@dataclass(frozen=True)
class MaterialSheetResult:
    materials: Tuple[MaterialFactor, ...]
    source: str  # "sheet" or "builtin"
    warning: Optional[str] = None


def _cell(row: Sequence[str], col: int) -> str:
    if col >= len(row):
        return ""
    return str(row[col]).strip().strip('"').strip()


def parse_material_csv(text: str) -> List[MaterialFactor]:
    """Parse the sheet export into material factors.

    The header row is skipped. Rows without a name or with a non-numeric
    factor are dropped; ids keep the row position (``sheet_<n>``) so they stay
    stable while the sheet is only appended to.
    """
    if not text.strip():
        return []
    df = pd.read_csv(
        io.StringIO(text),
        header=0,
        # Rows wider than the header must not turn column 0 into an index.
        index_col=False,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        on_bad_lines="skip",
    )

    materials: List[MaterialFactor] = []
    for index, row in enumerate(df.itertuples(index=False, name=None)):
        name = _cell(row, _NAME_COL)
        if not name:
            continue
        try:
            factor = float(_cell(row, _FACTOR_COL))
        except ValueError:
            continue
        if not math.isfinite(factor):
            continue
        materials.append(
            MaterialFactor(
                id=f"sheet_{index}",
                name=name,
                factor=factor,
                unit1=_cell(row, _UNIT1_COL),
                unit2=_cell(row, _UNIT2_COL),
            )
        )
    return materials


def fetch_material_sheet(url: str, *, timeout_s: float = 15) -> List[MaterialFactor]:
    """Download and parse the material sheet. Network and HTTP errors propagate."""
    r = requests.get(url, timeout=timeout_s)
    r.raise_for_status()
    # Sheet exports are UTF-8 even when the content type omits the charset.
    r.encoding = "utf-8"
    return parse_material_csv(r.text)


def load_material_db(
    url: str,
    *,
    current: Sequence[MaterialFactor] = INITIAL_MATERIAL_DB,
    timeout_s: float = 15,
) -> MaterialSheetResult:
    """Replace ``current`` with the sheet contents when the sheet yields rows.

    A failed fetch is not fatal: the current table is kept and a warning is
    returned for the UI to display. An empty sheet keeps the current table
    silently.
    """
    try:
        materials = fetch_material_sheet(url, timeout_s=timeout_s)
    except (requests.RequestException, pd.errors.ParserError, UnicodeDecodeError) as e:
        logger.warning("Failed to fetch material sheet %s: %s", url, e)
        return MaterialSheetResult(materials=tuple(current), source="builtin", warning=FETCH_WARNING)

    if not materials:
        logger.info("Material sheet %s had no usable rows; keeping %d built-in materials", url, len(current))
        return MaterialSheetResult(materials=tuple(current), source="builtin")

    logger.info("Loaded %d materials from sheet", len(materials))
    return MaterialSheetResult(materials=tuple(materials), source="sheet")
