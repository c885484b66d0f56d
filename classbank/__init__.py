"""
Этот пакет содержит:
- чтение таблиц (XLSX/CSV, первый лист)
- поиск строки-шапки и распознавание колонок
- разбор ячеек с действиями (איחור2חיסור1 и т.п.)
- сборку обновлений учеников из строк таблицы
- слияние с хранилищем (поведение / контакты / полугодие / оценки)
- рейтинг и экспорт отчётов
"""
from .config import ImportConfig, DEFAULT_ACTION_SCORES, load_config, save_config
from .errors import ClassbankError, WorkbookReadError, UnknownPolicyError
from .records import LogEntry, GradeEntry, StudentRecord, StudentUpdate, add_log, remove_log
from .merge import MergePolicy, merge_batch, merge_behavior, merge_contacts, merge_semester, merge_grades
from .pipeline import ImportResult, parse_behavior_file, parse_grades_file, import_file, import_grades_file
from .store import load_store, save_store, dump_backup, load_backup
from .ranking import build_leaderboard, class_total, action_summary
from .export import export_comments_to_excel_bytes, export_report_to_excel_bytes

__all__ = [
    "ImportConfig",
    "DEFAULT_ACTION_SCORES",
    "load_config",
    "save_config",
    "ClassbankError",
    "WorkbookReadError",
    "UnknownPolicyError",
    "LogEntry",
    "GradeEntry",
    "StudentRecord",
    "StudentUpdate",
    "add_log",
    "remove_log",
    "MergePolicy",
    "merge_batch",
    "merge_behavior",
    "merge_contacts",
    "merge_semester",
    "merge_grades",
    "ImportResult",
    "parse_behavior_file",
    "parse_grades_file",
    "import_file",
    "import_grades_file",
    "load_store",
    "save_store",
    "dump_backup",
    "load_backup",
    "build_leaderboard",
    "class_total",
    "action_summary",
    "export_comments_to_excel_bytes",
    "export_report_to_excel_bytes",
]
