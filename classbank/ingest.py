from __future__ import annotations
import csv
import logging
import re
from io import BytesIO
from typing import List, Any, Optional
import pandas as pd
from openpyxl import load_workbook
from .errors import WorkbookReadError

logger = logging.getLogger(__name__)

ORIGIN_COL = "_origin_row"
# расширения, которые принимает загрузка файла
UPLOAD_TYPES = ("xlsx", "xlsm", "csv")
# =========================

# Excel: читаем первый лист как матрицу, разворачиваем merged cells
# =========================
def _sheet_to_matrix_with_merged(wb_bytes: bytes, max_rows: Optional[int] = None) -> List[List[Any]]:
    wb = load_workbook(BytesIO(wb_bytes), read_only=False, data_only=True)
    ws = wb.worksheets[0]
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    max_r = ws.max_row
    if max_rows is not None:
        max_r = min(max_r, max_rows)

    for r, values in enumerate(ws.iter_rows(min_row=1, max_row=max_r, values_only=True), start=1):
        row_vals = []
        for c, v in enumerate(values, start=1):
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(v)
        rows.append(row_vals)

    return rows
# =========================

# CSV: устойчивое чтение из bytes (выгрузки из Google Sheets / Excel)
# =========================
_CSV_NUM_RE = re.compile(r"^[-+]?\d+(\.\d+)?$")

def _decode_sample(data: bytes, enc: str, limit: int = 65536) -> str:
    return data[:limit].decode(enc, errors="replace")


def _guess_delimiter(sample_text: str) -> str:
    # ',' (en-US), ';' (часть локалей Excel), иногда табы
    try:
        dialect = csv.Sniffer().sniff(sample_text, delimiters=";,\t|")
        if dialect.delimiter:
            return dialect.delimiter
    except csv.Error:
        pass

    # fallback по количеству в первых строках
    candidates = [";", ",", "\t", "|"]
    lines = [ln for ln in sample_text.splitlines() if ln.strip()][:20]
    if not lines:
        return ","

    scores = {}
    for d in candidates:
        cnts = [ln.count(d) for ln in lines]
        scores[d] = sum(cnts) / max(1, len(cnts))

    best = max(scores.items(), key=lambda x: x[1])[0]
    return best if scores.get(best, 0) > 0 else ","


def _coerce_csv_cell(v: Any) -> Any:
    """
    CSV читается строками, чтобы телефоны не теряли ведущий ноль.
    "Голые" числа без ведущего нуля превращаем обратно в числа (как их видит Excel).
    """
    if v is None:
        return None
    s = str(v).strip()
    if not s:
        return None
    if _CSV_NUM_RE.match(s):
        # "+972..." - международный номер, "+" не теряем
        if s.startswith("+"):
            return s
        digits = s.lstrip("-")
        if len(digits) > 1 and digits[0] == "0" and digits[1] != ".":
            return s
        return float(s) if "." in s else int(s)
    return s


def _read_csv_bytes(data: bytes) -> pd.DataFrame:
    # читаем CSV БЕЗ header: строка заголовков попадает в матрицу как обычная строка
    encodings = ["utf-8-sig", "utf-8", "cp1255"]
    last_err: Exception | None = None

    for enc in encodings:
        try:
            sample = _decode_sample(data, enc)
            delim = _guess_delimiter(sample)
            df = pd.read_csv(
                BytesIO(data),
                header=None,
                sep=delim,
                engine="python",
                encoding=enc,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
            return df.apply(lambda col: col.map(_coerce_csv_cell)).astype(object)
        except (UnicodeDecodeError, ValueError, pd.errors.ParserError) as e:
            last_err = e
            continue

    raise last_err or ValueError("CSV не распознан")
# =========================

# Main: bytes -> матрица первого листа
# =========================
def read_sheet_matrix(data: bytes, source_name: str = "") -> pd.DataFrame:
    """
    Возвращает "сырую" матрицу первого листа (dtype=object, без заголовков):
      - первая колонка - _origin_row (номер строки в исходнике, с 1)
      - дальше ячейки как есть: str / int / float / datetime / None
    Любая ошибка разбора файла -> WorkbookReadError (частичного результата нет).
    """
    if not data:
        raise WorkbookReadError(source_name, "пустой файл")
    if source_name.lower().endswith(".xls"):
        # старый двоичный формат: openpyxl его не читает
        raise WorkbookReadError(source_name, "формат .xls не поддерживается, сохраните файл как .xlsx")

    try:
        if source_name.lower().endswith(".csv"):
            df_raw = _read_csv_bytes(data)
        else:
            try:
                matrix = _sheet_to_matrix_with_merged(data)
                df_raw = pd.DataFrame(matrix, dtype=object)
            except Exception as e:
                # fallback: движок pandas по умолчанию
                logger.debug("openpyxl не смог прочитать %s: %s", source_name, e)
                try:
                    df_raw = pd.read_excel(BytesIO(data), sheet_name=0, header=None, dtype=object)
                except Exception:
                    raise e
    except Exception as e:
        logger.warning("Файл %s не прочитан: %s", source_name or "<bytes>", e)
        raise WorkbookReadError(source_name, str(e)) from e

    df_raw = df_raw.astype(object).where(pd.notna(df_raw), None)
    df_raw.columns = range(df_raw.shape[1])
    df_raw.insert(0, ORIGIN_COL, range(1, len(df_raw) + 1))
    logger.info("Прочитано %s: %d строк x %d колонок", source_name or "<bytes>", len(df_raw), df_raw.shape[1] - 1)
    return df_raw
