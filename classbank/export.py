from __future__ import annotations
import pandas as pd
from io import BytesIO
from typing import Mapping
from .ranking import build_leaderboard
from .records import StudentRecord

COMMENTS_SHEET = "הערות לתעודה"
RANKING_SHEET = "דירוג"
SEMESTER_SHEET = "דירוג מחצית"
LOGS_SHEET = "פירוט פעולות"


def _comments_frame(store: Mapping[str, StudentRecord]) -> pd.DataFrame:
    rows = []
    for rec in store.values():
        rows.append({
            "שם התלמיד": rec.name,
            "הערה לתעודה": rec.certificate_comment,
            "דגשים": rec.academic_reinforcement,
            "ציונים": ", ".join(f"{g.subject}: {g.score:g}" for g in (rec.grades or [])),
        })
    return pd.DataFrame(rows, columns=["שם התלמיד", "הערה לתעודה", "דגשים", "ציונים"])


def _logs_frame(store: Mapping[str, StudentRecord]) -> pd.DataFrame:
    cols = ["שם", "מקצוע", "מורה", "פעולה", "כמות", "ניקוד", "תאריך"]
    rows = [
        [rec.name, e.subject, e.teacher, e.action, e.count, e.score, e.date]
        for rec in store.values()
        for e in rec.logs
    ]
    return pd.DataFrame(rows, columns=cols)


def _format_sheet(writer, wb, sheet_name: str, df: pd.DataFrame, default_width: int = 18, max_width: int = 60):
    fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})
    ws = writer.sheets.get(sheet_name)
    if ws is None:
        return
    ws.right_to_left()
    ws.freeze_panes(1, 0)
    ws.autofilter(0, 0, max(1, len(df)), max(0, len(df.columns) - 1))
    for col, name in enumerate(df.columns):
        ws.write(0, col, name, fmt_header)
        w = max(10, min(max_width, int(len(str(name)) * 1.2) + 10))
        ws.set_column(col, col, max(default_width, w))


def export_comments_to_excel_bytes(store: Mapping[str, StudentRecord]) -> bytes:
    # имя, комментарий для табеля, акценты, оценки одной строкой
    df = _comments_frame(store)
    bio = BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=COMMENTS_SHEET)
        _format_sheet(writer, writer.book, COMMENTS_SHEET, df, default_width=24, max_width=80)
    return bio.getvalue()


def export_report_to_excel_bytes(store: Mapping[str, StudentRecord]) -> bytes:
    ranking = build_leaderboard(store, mode="regular", include_hidden=True)
    semester = build_leaderboard(store, mode="semester", include_hidden=True)
    logs = _logs_frame(store)

    bio = BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        ranking.to_excel(writer, index=False, sheet_name=RANKING_SHEET)
        if any(rec.semester_score is not None for rec in store.values()):
            semester.to_excel(writer, index=False, sheet_name=SEMESTER_SHEET)
        logs.to_excel(writer, index=False, sheet_name=LOGS_SHEET)

        wb = writer.book
        _format_sheet(writer, wb, RANKING_SHEET, ranking, default_width=14, max_width=40)
        _format_sheet(writer, wb, SEMESTER_SHEET, semester, default_width=14, max_width=40)
        _format_sheet(writer, wb, LOGS_SHEET, logs, default_width=16, max_width=40)
    return bio.getvalue()
