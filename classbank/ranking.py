from __future__ import annotations
from typing import Mapping
import pandas as pd
from .records import StudentRecord

PLACE_COL = "מקום"
NAME_COL = "שם"
SCORE_COL = "ניקוד"


def _score(rec: StudentRecord, mode: str) -> float:
    if mode == "semester":
        return float(rec.semester_score or 0.0)
    return float(rec.total)


def build_leaderboard(
    store: Mapping[str, StudentRecord],
    mode: str = "regular",
    query: str = "",
    include_hidden: bool = False,
) -> pd.DataFrame:
    """
    Рейтинг для подиума.
    mode="regular" - по текущему итогу, mode="semester" - по итогу полугодия.
    Убранные с подиума ученики не показываются (если include_hidden=False).
    query - фильтр по подстроке имени; места считаются до фильтра.
    """
    if mode not in ("regular", "semester"):
        raise ValueError(f"Неизвестный режим рейтинга: {mode!r}")

    rows = [
        {NAME_COL: rec.name, SCORE_COL: _score(rec, mode)}
        for rec in store.values()
        if include_hidden or not rec.hidden_from_podium
    ]
    if not rows:
        return pd.DataFrame(columns=[PLACE_COL, NAME_COL, SCORE_COL])

    df = pd.DataFrame(rows).sort_values(SCORE_COL, ascending=False, kind="stable").reset_index(drop=True)
    df.insert(0, PLACE_COL, df.index + 1)

    if query:
        df = df[df[NAME_COL].str.contains(query, regex=False)].reset_index(drop=True)
    return df


def class_total(store: Mapping[str, StudentRecord]) -> float:
    return float(sum(rec.total for rec in store.values()))


def action_summary(store: Mapping[str, StudentRecord]) -> pd.DataFrame:
    # сколько раз встречалось каждое действие и сколько баллов оно дало классу
    rows = [
        {"פעולה": e.action, "כמות": e.count, "ניקוד": e.score}
        for rec in store.values()
        for e in rec.logs
    ]
    if not rows:
        return pd.DataFrame(columns=["פעולה", "כמות", "ניקוד"])
    df = pd.DataFrame(rows).groupby("פעולה", as_index=False).agg({"כמות": "sum", "ניקוד": "sum"})
    return df.sort_values("ניקוד", ascending=False).reset_index(drop=True)
