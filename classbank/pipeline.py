"""
Верхний уровень: байты файла -> batch -> слияние с хранилищем.

Разбор целиком выполняется до слияния: если файл не читается,
WorkbookReadError поднимается раньше, чем тронуто хранилище.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional, Union
import pandas as pd
from .config import ImportConfig
from .grades import parse_grades_table
from .header_detect import build_table, detect_header_row
from .ingest import read_sheet_matrix
from .merge import MergePolicy, as_policy, merge_batch, merge_grades
from .normalize import parse_behavior_table
from .records import GradeEntry, ImportBatch, Store, StudentRecord

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    store: Store
    batch: ImportBatch
    policy: MergePolicy


def read_table(data: bytes, source_name: str = "", max_scan_rows: int = 80) -> pd.DataFrame:
    df_raw = read_sheet_matrix(data, source_name)
    header_row = detect_header_row(df_raw, max_scan_rows=max_scan_rows)
    logger.debug("Шапка %s: строка %d", source_name or "<bytes>", header_row + 1)
    return build_table(df_raw, header_row)


def parse_behavior_file(
    data: bytes,
    config: ImportConfig,
    source_name: str = "",
    import_date: Optional[date] = None,
) -> ImportBatch:
    table = read_table(data, source_name, max_scan_rows=config.max_header_scan_rows)
    return parse_behavior_table(table, config, import_date=import_date)


def parse_grades_file(data: bytes, source_name: str = "", max_scan_rows: int = 80) -> Dict[str, List[GradeEntry]]:
    return parse_grades_table(read_table(data, source_name, max_scan_rows=max_scan_rows))


def import_file(
    store: Mapping[str, StudentRecord],
    data: bytes,
    config: ImportConfig,
    policy: Union[MergePolicy, str],
    source_name: str = "",
    import_date: Optional[date] = None,
) -> ImportResult:
    pol = as_policy(policy)
    batch = parse_behavior_file(data, config, source_name=source_name, import_date=import_date)
    return ImportResult(store=merge_batch(store, batch, pol), batch=batch, policy=pol)


def import_grades_file(
    store: Mapping[str, StudentRecord],
    data: bytes,
    source_name: str = "",
    config: Optional[ImportConfig] = None,
) -> Store:
    scan = config.max_header_scan_rows if config is not None else 80
    return merge_grades(store, parse_grades_file(data, source_name, max_scan_rows=scan))
