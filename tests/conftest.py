from datetime import date
from io import BytesIO
from typing import Any, Iterable, List, Sequence

import pandas as pd
import pytest
from openpyxl import Workbook

from classbank.config import ImportConfig


def make_xlsx(rows: Iterable[Sequence[Any]]) -> bytes:
    """Workbook with one sheet, rows written top to bottom."""
    wb = Workbook()
    ws = wb.active
    for r in rows:
        ws.append(list(r))
    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def make_table(headers: List[str], rows: Iterable[Sequence[Any]]) -> pd.DataFrame:
    """Already-headed table, as build_table() returns it (without _origin_row)."""
    return pd.DataFrame([list(r) for r in rows], columns=headers, dtype=object)


IMPORT_DAY = date(2024, 3, 5)


@pytest.fixture
def config() -> ImportConfig:
    return ImportConfig()
