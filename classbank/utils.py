import os
import re
import json
import math
import logging
from datetime import date
from numbers import Real
from pathlib import Path
from typing import Any, Optional
from dateutil import parser as dtparser

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

APPDATA = os.environ.get("APPDATA")
if os.environ.get("CLASSBANK_DATA_DIR"):
    USER_DATA_DIR = Path(os.environ["CLASSBANK_DATA_DIR"])
elif APPDATA:
    USER_DATA_DIR = Path(APPDATA) / "ClassBank" / "data"
else:
    USER_DATA_DIR = DEFAULT_DATA_DIR  # fallback

def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as e:
        logger.warning("Не удалось прочитать %s: %s", path, e)
        return default

def save_json(path: Path, obj: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP варианты
_DASH_CHARS_RE = re.compile(r"[\u2010\u2011\u2012\u2013\u2014\u2212]")
# направление текста (RTL/LTR метки), часто приходят из Excel на иврите
_BIDI_RE = re.compile(r"[\u200E\u200F\u202A-\u202E]")
# ведущее число как в parseFloat: "42 נק'" -> 42, "3.5x" -> 3.5
_LEADING_NUM_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def norm_text(s: Any) -> str:
    """
    Нормализация текста ячейки/заголовка:
    - BOM/неразрывные пробелы/bidi-метки
    - все виды тире -> '-'
    - схлопывание пробелов
    Регистр НЕ меняется: сопоставление алиасов регистрозависимое.
    """
    if s is None:
        return ""
    s = cell_text(s)
    s = s.replace("\ufeff", "")
    s = _BIDI_RE.sub("", s)
    s = _NBSP_RE.sub(" ", s)
    s = _DASH_CHARS_RE.sub("-", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s

def is_number(v: Any) -> bool:
    # "голое" число из таблицы (bool - не число, NaN - пустая ячейка)
    if isinstance(v, bool) or not isinstance(v, Real):
        return False
    return not math.isnan(float(v))

def is_empty(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and math.isnan(v):
        return True
    if isinstance(v, str) and not v.strip():
        return True
    return False

def cell_text(v: Any) -> str:
    # 501234567.0 -> "501234567": целые числа из Excel не должны получать ".0"
    if is_empty(v):
        return ""
    if is_number(v):
        f = float(v)
        if f.is_integer():
            return str(int(f))
        return str(f)
    return str(v)

def parse_float(v: Any) -> Optional[float]:
    """Число из ячейки; строки разбираются по ведущему числу, остальное - None."""
    if is_number(v):
        return float(v)
    if is_empty(v) or not isinstance(v, str):
        return None
    m = _LEADING_NUM_RE.match(v)
    if not m:
        return None
    try:
        return float(m.group(1))
    except ValueError:
        return None

def clean_phone(v: Any) -> str:
    # оставляем только цифры и '+'
    return re.sub(r"[^0-9+]", "", cell_text(v))

def try_parse_date(s: Any) -> Optional[date]:
    # дата из ячейки колонки "תאריך": datetime/date из Excel или строка dd.mm.yyyy
    if s is None:
        return None

    # pandas.Timestamp / datetime.date / datetime.datetime
    if hasattr(s, "year") and hasattr(s, "month") and hasattr(s, "day"):
        try:
            return date(int(s.year), int(s.month), int(s.day))
        except (TypeError, ValueError):
            return None

    txt = norm_text(s)
    if not txt:
        return None

    txt = txt.replace(",", ".")
    # dd.mm[.yyyy]
    if re.match(r"^\d{1,2}[./-]\d{1,2}([./-]\d{2,4})?$", txt):
        try:
            return dtparser.parse(txt, dayfirst=True).date()
        except (ValueError, OverflowError):
            return None

    # yyyy-mm-dd
    if re.match(r"^\d{4}[./-]\d{1,2}[./-]\d{1,2}$", txt):
        try:
            return dtparser.parse(txt, dayfirst=False).date()
        except (ValueError, OverflowError):
            return None

    return None

def format_date(d: date) -> str:
    # формат he-IL: 5.3.2024
    return f"{d.day}.{d.month}.{d.year}"

def store_path() -> Path:
    return USER_DATA_DIR / "students.json"

def config_path() -> Path:
    return USER_DATA_DIR / "config.json"
