"""
Распознавание колонок таблицы: заголовок -> каноническое поле.

Заголовок подходит под поле, если он равен алиасу или содержит его
(регистрозависимо). Если заголовок подходит под несколько полей, побеждает
поле с самым длинным совпавшим алиасом: "נייד של אמא" - это телефон мамы,
а не её имя (через "אמא"). При равной длине колонка достаётся всем полям -
так "שם פרטי" одновременно и имя, и полное имя.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set
from .ingest import ORIGIN_COL
from .records import CONTACT_FIELDS
from .utils import cell_text, is_empty, norm_text

logger = logging.getLogger(__name__)

FIELD_ALIASES: Dict[str, tuple] = {
    "name": ("שם התלמיד", "שם פרטי", "שם משפחה", "שם מלא", "תלמיד", "שם",
             "Student Name", "Full Name", "First Name", "Last Name", "Name"),
    "last_name": ("שם משפחה", "משפחה", "Last Name"),
    "first_name": ("שם פרטי", "פרטי", "First Name"),

    "student_cell": ("סלולרי של התלמיד", "נייד תלמיד", "טלפון תלמיד", "פלאפון תלמיד", "נייד של התלמיד"),
    "student_email": ("מייל תלמיד", 'דוא"ל תלמיד', "אימייל תלמיד", "Student Email"),
    "home_phone": ("טלפון בבית", "טלפון בית", "בבית", "Home Phone", "טלפון נייח"),
    "mother_name": ("שם האמא", "שם האם", "אמא", "שם הורה 1", "הורה 1", "Mother Name", "שם אם"),
    "mother_phone": ("טלפון נייד של אמא", "נייד של אמא", "טלפון אמא", "נייד אמא", "נייד הורה 1",
                     "טלפון הורה 1", "נייד 1", "Mother Phone", "סלולרי אם"),
    "mother_email": ('דוא"ל של אמא', 'דוא"ל אמא', "מייל אמא", "אימייל אמא", "Email Mother"),
    "father_name": ("שם האבא", "שם האב", "אבא", "שם הורה 2", "הורה 2", "Father Name", "שם אב"),
    "father_phone": ("טלפון נייד של אבא", "נייד של אבא", "טלפון אבא", "נייד אבא", "נייד הורה 2",
                     "טלפון הורה 2", "נייד 2", "Father Phone", "סלולרי אב"),
    "father_email": ('דוא"ל של אבא', 'דוא"ל אבא', "מייל אבא", "אימייל אבא", "Email Father"),

    "teacher": ("מורה", "שם המורה", 'דווח ע"י', "מדווח"),
    "date": ("תאריך", "Date"),

    # итоговый балл (файлы полугодия/сводки)
    "total_score": ('סה"כ', "ניקוד סופי", "ציון כולל", 'סה"כ נקודות', "Total Score", "Total",
                    "סיכום", "מאזן", "ניקוד", "ציון", "ממוצע", "לתעודה", "מחצית", "מצטיין"),
}

IDENTITY_FIELDS = ("name", "first_name", "last_name")
METADATA_FIELDS = ("teacher", "date")
SUBJECT_TEACHER_SEP = "-"

# служебные колонки, сравнение точное
METADATA_HEADERS = {"מס", "מס'", "כיתה", "שכבה", "ת.ז"}

# строки-итоги внизу листа
TOTAL_ROW_MARKERS = ('סה"כ', "סה'כ", "סה״כ", "סהכ", "Total", "TOTAL")
MIN_NAME_LEN = 2


def header_matches(header: str, alias: str) -> bool:
    h = header.strip()
    return h == alias or alias in h


def classify_header(header: str, aliases: Mapping[str, Sequence[str]] = FIELD_ALIASES) -> Set[str]:
    best_len = 0
    best: Set[str] = set()
    for fld, names in aliases.items():
        ln = max((len(a) for a in names if header_matches(header, a)), default=0)
        if ln == 0:
            continue
        if ln > best_len:
            best_len = ln
            best = {fld}
        elif ln == best_len:
            best.add(fld)
    return best


@dataclass
class HeaderMap:
    columns: List[str]
    fields: Dict[str, List[str]] = field(default_factory=dict)
    # колонки, которые не разбираются как действия
    excluded: Set[str] = field(default_factory=set)

    def columns_for(self, fld: str) -> List[str]:
        return self.fields.get(fld, [])

    def has(self, fld: str) -> bool:
        return bool(self.fields.get(fld))


def resolve_columns(columns: Sequence[Any]) -> HeaderMap:
    cols = [str(c) for c in columns if str(c) != ORIGIN_COL]
    hmap = HeaderMap(columns=cols)
    skip_fields = set(IDENTITY_FIELDS) | set(METADATA_FIELDS) | set(CONTACT_FIELDS)

    for c in cols:
        matched = classify_header(c)
        # "מתמטיקה - המורה כהן" - предмет с учителем, а не колонка учителя/даты
        if SUBJECT_TEACHER_SEP in c:
            matched -= set(METADATA_FIELDS)
        for fld in matched:
            hmap.fields.setdefault(fld, []).append(c)
        if matched & skip_fields or c.strip() in METADATA_HEADERS:
            hmap.excluded.add(c)

    logger.debug("Колонки распознаны: %s", {k: v for k, v in hmap.fields.items()})
    return hmap


def row_value(row: Mapping[str, Any], columns: Sequence[str]) -> Any:
    # первое непустое значение среди колонок поля (в порядке листа)
    for c in columns:
        v = row.get(c)
        if not is_empty(v):
            return v
    return None


def is_valid_name(name: str) -> bool:
    if not name or name in ("None", "nan", "undefined"):
        return False
    if len(name) < MIN_NAME_LEN:
        return False
    return not any(m in name for m in TOTAL_ROW_MARKERS)


def row_name(row: Mapping[str, Any], hmap: HeaderMap) -> Optional[str]:
    """
    Имя ученика из строки: "פרטי משפחה", если есть обе части, иначе полное имя.
    None - строка не ученик (пусто, итог, слишком коротко).
    """
    first = row_value(row, hmap.columns_for("first_name"))
    last = row_value(row, hmap.columns_for("last_name"))

    if first is not None and last is not None:
        name = norm_text(f"{cell_text(first)} {cell_text(last)}")
    else:
        name = norm_text(row_value(row, hmap.columns_for("name")))

    return name if is_valid_name(name) else None
