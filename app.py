from __future__ import annotations
import logging
from datetime import date
import pandas as pd
import streamlit as st
from classbank.config import load_config, save_config
from classbank.errors import WorkbookReadError
from classbank.ingest import UPLOAD_TYPES
from classbank.export import export_comments_to_excel_bytes, export_report_to_excel_bytes
from classbank.merge import MergePolicy, merge_batch, merge_grades
from classbank.normalize import batch_to_frame
from classbank.pipeline import parse_behavior_file, parse_grades_file
from classbank.ranking import action_summary, build_leaderboard, class_total
from classbank.records import LogEntry, add_log, remove_log
from classbank.store import dump_backup, load_backup, load_store, save_store
from classbank.utils import format_date

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="בנק התנהגות כיתתי", layout="wide")
st.title("בנק התנהגות כיתתי - ייבוא נתונים מאקסל")

IMPORT_TYPES = {
    "נקודות התנהגות (הוספה)": MergePolicy.BEHAVIOR,
    "אלפון (פרטי קשר)": MergePolicy.CONTACTS,
    "מצטייני מחצית": MergePolicy.SEMESTER,
    "ציונים לתעודה": "grades",
}

config = load_config()
store = load_store()
# =========================

# Баллы за действия (настраиваемо)
# =========================
with st.expander("ניקוד פעולות", expanded=False):
    scores_df = pd.DataFrame(
        [{"פעולה": k, "ניקוד": float(v)} for k, v in config.action_scores.items()]
    )
    edited = st.data_editor(scores_df, width="stretch", hide_index=True, num_rows="dynamic")
    if st.button("שמירת ניקוד"):
        scores = {}
        for _, r in edited.iterrows():
            name = str(r.get("פעולה", "") or "").strip()
            score = r.get("ניקוד")
            if name and not pd.isna(score):
                scores[name] = float(score)
        save_config(config.with_scores(scores))
        st.success("נשמר.")
        st.rerun()
    if not config.is_default():
        st.caption("הניקוד שונה מברירת המחדל.")
# =========================

# Импорт
# =========================
st.subheader("ייבוא קובץ")
kind = st.radio("סוג הקובץ", list(IMPORT_TYPES), horizontal=True)
upload = st.file_uploader("קובץ אקסל / CSV", type=list(UPLOAD_TYPES))

if upload is not None:
    data = upload.getvalue()
    policy = IMPORT_TYPES[kind]
    try:
        if policy == "grades":
            grades = parse_grades_file(data, source_name=upload.name, max_scan_rows=config.max_header_scan_rows)
            st.dataframe(pd.DataFrame(
                [{"שם": n, "ציונים": ", ".join(f"{g.subject}: {g.score:g}" for g in gs)} for n, gs in grades.items()]
            ), width="stretch")
            if st.button("שמירת ציונים", type="primary"):
                store = merge_grades(store, grades)
                save_store(store)
                st.success("הציונים נשמרו.")
        else:
            batch = parse_behavior_file(data, config, source_name=upload.name, import_date=date.today())
            st.dataframe(batch_to_frame(batch), width="stretch")
            if st.button("מיזוג לנתונים הקיימים", type="primary"):
                store = merge_batch(store, batch, policy)
                save_store(store)
                st.success("הנתונים עודכנו.")
    except WorkbookReadError as e:
        st.error(f"שגיאה בקובץ: {e}")
# =========================

# Рейтинг
# =========================
st.subheader("דירוג")
c1, c2 = st.columns(2)
with c1:
    mode = st.radio("מצב", ["regular", "semester"], format_func=lambda m: "רגיל" if m == "regular" else "אלוף המחצית", horizontal=True)
with c2:
    query = st.text_input("חיפוש תלמיד", value="")

st.dataframe(build_leaderboard(store, mode=mode, query=query), width="stretch", hide_index=True)
st.caption(f"סה\"כ נקודות בכיתה: {class_total(store):g}")

with st.expander("סיכום פעולות", expanded=False):
    st.dataframe(action_summary(store), width="stretch", hide_index=True)
# =========================

# Ручные начисления / удаление строки журнала
# =========================
with st.expander("עדכון ידני", expanded=False):
    if store:
        name = st.selectbox("תלמיד", sorted(store))
        rec = store[name]
        with st.form("manual_add_form", clear_on_submit=True):
            action = st.selectbox("פעולה", list(config.action_scores))
            count = st.number_input("כמות", min_value=1.0, value=1.0)
            subject = st.text_input("מקצוע", value="כללי")
            if st.form_submit_button("הוספה"):
                entry = LogEntry(subject, config.default_teacher, action, count,
                                 config.score_of(action) * count, format_date(date.today()))
                store[name] = add_log(rec, entry)
                save_store(store)
                st.rerun()

        if rec.logs:
            logs_df = pd.DataFrame([e.to_dict() for e in rec.logs])
            idx = st.number_input("מחיקת שורה #", min_value=0, max_value=len(rec.logs) - 1, value=0)
            st.dataframe(logs_df, width="stretch")
            if st.button("מחיקה"):
                store[name] = remove_log(rec, int(idx))
                save_store(store)
                st.rerun()
# =========================

# Экспорт / резервная копия
# =========================
st.subheader("גיבוי וייצוא")
d1, d2, d3 = st.columns(3)
with d1:
    st.download_button("דוח דירוג (Excel)", data=export_report_to_excel_bytes(store),
                       file_name=f"report_{date.today():%d-%m-%Y}.xlsx")
with d2:
    st.download_button("הערות לתעודה (Excel)", data=export_comments_to_excel_bytes(store),
                       file_name=f"הערות_לתעודה_{date.today():%d-%m-%Y}.xlsx")
with d3:
    st.download_button("גיבוי (JSON)", data=dump_backup(store, config),
                       file_name=f"backup_{date.today():%d-%m-%Y}.json")

restore = st.file_uploader("שחזור מגיבוי", type=["json"])
if restore is not None and st.button("שחזור"):
    try:
        restored_store, restored_cfg = load_backup(restore.getvalue())
    except ValueError as e:
        st.error(f"קובץ גיבוי לא תקין: {e}")
    else:
        save_store(restored_store)
        save_config(restored_cfg)
        st.success(f"שוחזרו {len(restored_store)} תלמידים.")
        st.rerun()
