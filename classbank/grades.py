from __future__ import annotations
import logging
from typing import Dict, List
import pandas as pd
from .headers import resolve_columns, row_name
from .ingest import ORIGIN_COL
from .records import GradeEntry
from .utils import parse_float

logger = logging.getLogger(__name__)


def parse_grades_table(table: pd.DataFrame) -> Dict[str, List[GradeEntry]]:
    """
    Таблица оценок: колонка имени + любые колонки-предметы.
    Каждая ячейка, которая читается как число, становится оценкой (предмет = заголовок).
    Текстовые ячейки пропускаются: не каждая колонка - оценка.
    Повтор имени в файле заменяет предыдущую строку.
    """
    hmap = resolve_columns(table.columns)
    subject_cols = [c for c in hmap.columns if c not in hmap.excluded]

    result: Dict[str, List[GradeEntry]] = {}
    for row in table.to_dict("records"):
        name = row_name(row, hmap)
        if name is None:
            logger.debug("Строка %s пропущена: нет имени ученика", row.get(ORIGIN_COL, "?"))
            continue

        grades: List[GradeEntry] = []
        for col in subject_cols:
            score = parse_float(row.get(col))
            if score is None:
                continue
            grades.append(GradeEntry(subject=col.strip(), score=score))
        result[name] = grades

    logger.info("Оценки разобраны: %d учеников", len(result))
    return result
