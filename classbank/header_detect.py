from __future__ import annotations
import logging
from typing import List
import pandas as pd
from .ingest import ORIGIN_COL
from .utils import norm_text, cell_text

logger = logging.getLogger(__name__)

# Маркеры строки-шапки списка учеников
FULL_NAME_MARKER = "שם התלמיד"
NAME_MARKER = "שם"
# "שם" вместе с одним из них - тоже шапка ("שם משפחה", "שם ... כיתה")
NAME_COMPANION_MARKERS = ["משפחה", "כיתה"]


def _row_text(row: pd.Series) -> str:
    return " ".join(cell_text(v) for v in row.tolist())


def is_header_row(text: str) -> bool:
    if FULL_NAME_MARKER in text:
        return True
    return NAME_MARKER in text and any(m in text for m in NAME_COMPANION_MARKERS)


def detect_header_row(df_raw: pd.DataFrame, max_scan_rows: int = 80) -> int:
    """
    Возвращает индекс (0-based) строки-шапки.
    Последняя строка в окне сканирования, где встречаются маркеры шапки:
    заголовок листа ("כיתה ז'1 - שם המחנכת") тоже содержит "שם", но стоит выше.
    Не нашли - строка 0 (тихая деградация, импорт не блокируем).
    """
    n = min(max_scan_rows, len(df_raw))
    cells = df_raw.drop(columns=[ORIGIN_COL], errors="ignore")
    found = None
    for i in range(n):
        if is_header_row(_row_text(cells.iloc[i])):
            found = i
    if found is not None:
        return found
    logger.debug("Шапка не найдена в первых %d строках, используется строка 0", n)
    return 0
# =========================

# Таблица с заголовками
# =========================
def _make_unique(cols: List[str]) -> List[str]:
    seen = {}
    out = []
    for i, c in enumerate(cols):
        base = c or f"col_{i + 1}"
        n = seen.get(base, 0) + 1
        seen[base] = n
        out.append(base if n == 1 else f"{base}__{n}")
    return out


def _clean_header_cell(v) -> str:
    s = norm_text(v)
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        s = s[1:-1].strip()
    return s


def build_table(df_raw: pd.DataFrame, header_row: int) -> pd.DataFrame:
    """
    Строка header_row становится именами колонок, всё ниже - данными.
    Полностью пустые строки данных выбрасываются.
    _origin_row сохраняется первой колонкой.
    """
    cells = df_raw.drop(columns=[ORIGIN_COL], errors="ignore")
    if len(cells) == 0:
        return pd.DataFrame(columns=[ORIGIN_COL])

    headers = _make_unique([_clean_header_cell(v) for v in cells.iloc[header_row].tolist()])
    data = cells.iloc[header_row + 1:].copy()
    data.columns = headers

    def _nonempty(row: pd.Series) -> bool:
        return any(cell_text(v).strip() for v in row.tolist())

    if len(data):
        data = data[data.apply(_nonempty, axis=1)]

    origin = df_raw[ORIGIN_COL] if ORIGIN_COL in df_raw.columns else pd.Series(range(1, len(df_raw) + 1))
    data.insert(0, ORIGIN_COL, origin.loc[data.index].tolist())
    return data.reset_index(drop=True)
