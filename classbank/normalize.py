from __future__ import annotations
import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional
import pandas as pd
from .config import ImportConfig
from .headers import HeaderMap, resolve_columns, row_name, row_value
from .ingest import ORIGIN_COL
from .records import CONTACT_FIELDS, PHONE_FIELDS, ImportBatch, LogEntry, StudentUpdate
from .actions import extract_actions, split_subject
from .utils import cell_text, clean_phone, format_date, is_empty, parse_float, try_parse_date

logger = logging.getLogger(__name__)


def _contact_value(fld: str, v: Any) -> str:
    if fld in PHONE_FIELDS:
        return clean_phone(v)
    return cell_text(v).strip()


def normalize_row(
    row: Mapping[str, Any],
    hmap: HeaderMap,
    config: ImportConfig,
    batch: ImportBatch,
    import_date: str,
) -> Optional[StudentUpdate]:
    """
    Одна строка таблицы -> обновление записи ученика в batch.
    Возвращает запись batch или None, если строка не про ученика (итог/пусто).
    """
    name = row_name(row, hmap)
    if name is None:
        logger.debug("Строка %s пропущена: нет имени ученика", row.get(ORIGIN_COL, "?"))
        return None

    # повтор имени в файле: итог и логи заменяются строкой ниже, контакты накапливаются
    prev = batch.get(name)
    entry = StudentUpdate(name=name, contacts=dict(prev.contacts) if prev else {})
    if prev is not None:
        logger.debug("Повтор имени %s (строка %s) - заменяет предыдущую", name, row.get(ORIGIN_COL, "?"))
    batch[name] = entry

    # контакты: последнее непустое значение в файле побеждает
    for fld in CONTACT_FIELDS:
        v = row_value(row, hmap.columns_for(fld))
        if v is None:
            continue
        val = _contact_value(fld, v)
        if val:
            entry.contacts[fld] = val

    row_teacher = cell_text(row_value(row, hmap.columns_for("teacher"))).strip() or config.default_teacher
    row_date = try_parse_date(row_value(row, hmap.columns_for("date")))
    log_date = format_date(row_date) if row_date else import_date

    found = False
    for col in hmap.columns:
        if col in hmap.excluded:
            continue
        v = row.get(col)
        if is_empty(v):
            continue
        subject, teacher = split_subject(col, row_teacher)
        for action, count in extract_actions(v, config, header=col):
            entry.add_log(LogEntry(
                subject=subject,
                teacher=teacher,
                action=action,
                count=count,
                score=config.score_of(action) * count,
                date=log_date,
            ))
            found = True

    # нет детализации (или всё в ноль) -> берём итог из колонки "סה"כ"/"ציון" как есть
    if not found or entry.total == 0:
        raw_total = row_value(row, hmap.columns_for("total_score"))
        if raw_total is not None:
            parsed = parse_float(raw_total)
            if parsed is None:
                logger.debug("Итог %r у %s не число - пропущен", raw_total, name)
            else:
                entry.total = parsed
                entry.explicit_total = parsed

    return entry


def parse_behavior_table(
    table: pd.DataFrame,
    config: ImportConfig,
    import_date: Optional[date] = None,
) -> ImportBatch:
    """
    Таблица с заголовками -> {имя: StudentUpdate}.
    Строка с уже встреченным именем заменяет предыдущую (складывает только Merger).
    """
    hmap = resolve_columns(table.columns)
    if not hmap.has("name") and not (hmap.has("first_name") and hmap.has("last_name")):
        logger.warning("Колонка с именем ученика не найдена: %s", hmap.columns)

    day = format_date(import_date or date.today())
    batch: ImportBatch = {}
    skipped = 0
    for row in table.to_dict("records"):
        if normalize_row(row, hmap, config, batch, day) is None:
            skipped += 1

    logger.info("Разобрано учеников: %d (пропущено строк: %d)", len(batch), skipped)
    return batch


def batch_to_frame(batch: ImportBatch) -> pd.DataFrame:
    # предпросмотр результата разбора (для UI/отладки)
    rows: list[Dict[str, Any]] = []
    for upd in batch.values():
        rows.append({
            "שם": upd.name,
            "ניקוד": upd.total,
            "פעולות": len(upd.logs),
            "סה\"כ מפורש": upd.explicit_total,
            **{f: upd.contacts.get(f, "") for f in CONTACT_FIELDS},
        })
    return pd.DataFrame(rows)
