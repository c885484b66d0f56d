"""
Разбор ячейки с действиями: "איחור2חיסור1", "מילה טובה: 3 הפרעה-1".

Ячейка читается как повторяющаяся пара [текст][число]. Сканирование - явный
автомат (текст -> цифры -> необязательная дробная часть -> снова текст),
без регулярных выражений, за один проход по строке.
"""
from __future__ import annotations
from typing import Iterator, Optional, Sequence, Tuple
from .config import ImportConfig
from .headers import SUBJECT_TEACHER_SEP
from .utils import cell_text, is_number

DIGITS = "0123456789"
LABEL_TRAILING = ":-()"


def scan_pairs(text: str) -> Iterator[Tuple[str, str]]:
    """
    Возвращает пары (метка, число-строкой) в порядке появления.
    Цифры в начале строки без метки пропускаются; метка без числа в конце - тоже.
    """
    i = 0
    n = len(text)
    while i < n:
        # метка: максимальный отрезок НЕ цифр
        start = i
        while i < n and text[i] not in DIGITS:
            i += 1
        label = text[start:i]
        if i >= n:
            return

        # число: цифры + необязательно ".цифры"
        num_start = i
        while i < n and text[i] in DIGITS:
            i += 1
        if i + 1 < n and text[i] == "." and text[i + 1] in DIGITS:
            i += 1
            while i < n and text[i] in DIGITS:
                i += 1
        number = text[num_start:i]

        if label:
            yield label, number


def clean_label(label: str) -> str:
    # "איחור: " -> "איחור", "מילה  טובה" -> "מילה טובה"
    s = label.strip().rstrip(LABEL_TRAILING).strip()
    return " ".join(s.split())


def match_action(label: str, ordered_actions: Sequence[str]) -> Optional[str]:
    # ordered_actions отсортированы по длине (длинные первыми)
    for k in ordered_actions:
        if k and k in label:
            return k
    return None


def extract_actions(value, config: ImportConfig, header: Optional[str] = None) -> Iterator[Tuple[str, float]]:
    """
    Генератор пар (действие, количество) для одной ячейки.
    Если текст ячейки ничего не дал, но сама ячейка - число, а заголовок колонки
    содержит название действия, то всё значение ячейки - количество этого действия
    (таблицы "колонка на действие").
    """
    text = cell_text(value)
    found = False
    for label, number in scan_pairs(text):
        action = match_action(clean_label(label), config.ordered_actions)
        if action is None:
            continue
        found = True
        yield action, float(number)

    if not found and header and is_number(value):
        action = match_action(" ".join(header.split()), config.ordered_actions)
        if action is not None:
            yield action, float(value)


def split_subject(header: str, default_teacher: str) -> Tuple[str, str]:
    # "מתמטיקה - כהן" -> ("מתמטיקה", "כהן")
    if SUBJECT_TEACHER_SEP in header:
        parts = header.split(SUBJECT_TEACHER_SEP)
        return parts[0].strip(), parts[1].strip()
    return header.strip(), default_teacher
