from datetime import datetime

from classbank.normalize import batch_to_frame, parse_behavior_table
from classbank.records import LogEntry

from conftest import IMPORT_DAY, make_table


def parse(headers, rows, config):
    return parse_behavior_table(make_table(headers, rows), config, import_date=IMPORT_DAY)


class TestActionLogs:
    def test_each_action_becomes_a_log_entry(self, config):
        batch = parse(
            ["שם התלמיד", "מתמטיקה - כהן", "אנגלית"],
            [["דני כהן", "איחור2חיסור1", "מילה טובה5"]],
            config,
        )
        rec = batch["דני כהן"]

        assert rec.logs == [
            LogEntry("מתמטיקה", "כהן", "איחור", 2.0, -2.0, "5.3.2024"),
            LogEntry("מתמטיקה", "כהן", "חיסור", 1.0, -1.0, "5.3.2024"),
            LogEntry("אנגלית", "צוות", "מילה טובה", 5.0, 5.0, "5.3.2024"),
        ]
        assert rec.total == sum(e.score for e in rec.logs) == 2.0
        assert rec.explicit_total is None

    def test_score_uses_configured_vocabulary(self, config):
        cfg = config.with_action("איחור", -3)
        batch = parse(["שם התלמיד", "אנגלית"], [["דני כהן", "איחור2"]], cfg)
        assert batch["דני כהן"].logs[0].score == -6.0

    def test_one_column_per_action(self, config):
        batch = parse(["שם התלמיד", "איחור", "מילה טובה"], [["דני כהן", 2, 1]], config)
        rec = batch["דני כהן"]
        assert [(e.subject, e.action, e.count) for e in rec.logs] == [
            ("איחור", "איחור", 2.0),
            ("מילה טובה", "מילה טובה", 1.0),
        ]
        assert rec.total == -1.0

    def test_teacher_column(self, config):
        batch = parse(["שם התלמיד", "מורה", "אנגלית"], [["דני כהן", "לוי", "איחור1"]], config)
        assert batch["דני כהן"].logs[0].teacher == "לוי"

    def test_header_teacher_beats_teacher_column(self, config):
        batch = parse(["שם התלמיד", "מורה", "מתמטיקה - כהן"], [["דני כהן", "לוי", "איחור1"]], config)
        assert batch["דני כהן"].logs[0].teacher == "כהן"

    def test_teacher_word_in_subject_header(self, config):
        batch = parse(["שם התלמיד", "מתמטיקה - המורה כהן"], [["דני כהן", "איחור2"]], config)
        rec = batch["דני כהן"]
        assert rec.logs == [LogEntry("מתמטיקה", "המורה כהן", "איחור", 2.0, -2.0, "5.3.2024")]
        assert rec.total == -2.0

    def test_row_date_column(self, config):
        batch = parse(
            ["שם התלמיד", "תאריך", "אנגלית"],
            [["דני כהן", "12.1.2024", "איחור1"], ["רות לוי", datetime(2024, 2, 7), "איחור1"]],
            config,
        )
        assert batch["דני כהן"].logs[0].date == "12.1.2024"
        assert batch["רות לוי"].logs[0].date == "7.2.2024"

    def test_excluded_columns_are_not_tokenized(self, config):
        batch = parse(
            ["מס", "שם התלמיד", "שם האבא", "כיתה", "אנגלית"],
            [[1, "דני כהן", "איחור1", "חיסור1", None]],
            config,
        )
        rec = batch["דני כהן"]
        assert rec.logs == []
        assert rec.total == 0.0
        assert rec.contacts == {"father_name": "איחור1"}


class TestTotalFallback:
    def test_explicit_total_without_details(self, config):
        batch = parse(["שם התלמיד", 'סה"כ'], [["דני כהן", 42]], config)
        rec = batch["דני כהן"]
        assert rec.total == 42
        assert rec.logs == []
        assert rec.explicit_total == 42

    def test_total_text_with_trailing_words(self, config):
        batch = parse(["שם התלמיד", "ניקוד סופי"], [["דני כהן", "17 נק'"]], config)
        assert batch["דני כהן"].total == 17.0

    def test_non_numeric_total_is_ignored(self, config):
        batch = parse(["שם התלמיד", 'סה"כ'], [["דני כהן", "לא ידוע"]], config)
        rec = batch["דני כהן"]
        assert rec.total == 0.0
        assert rec.explicit_total is None

    def test_details_summing_to_zero_use_total_column(self, config):
        batch = parse(
            ["שם התלמיד", "אנגלית", 'סה"כ'],
            [["דני כהן", "איחור1מילה טובה1", 7]],
            config,
        )
        rec = batch["דני כהן"]
        assert rec.total == 7.0
        assert len(rec.logs) == 2

    def test_details_override_total_column(self, config):
        batch = parse(["שם התלמיד", "אנגלית", 'סה"כ'], [["דני כהן", "איחור2", 7]], config)
        assert batch["דני כהן"].total == -2.0


class TestContacts:
    def test_phone_cleanup_and_trim(self, config):
        batch = parse(
            ["שם התלמיד", "נייד אמא", "מייל אמא", "הערות"],
            [["דני כהן", "050-111 1111", " a@b.co ", None]],
            config,
        )
        assert batch["דני כהן"].contacts == {"mother_phone": "0501111111", "mother_email": "a@b.co"}

    def test_numeric_phone_has_no_decimal_suffix(self, config):
        batch = parse(["שם התלמיד", "טלפון בית"], [["דני כהן", 31234567.0]], config)
        assert batch["דני כהן"].contacts == {"home_phone": "31234567"}


class TestRowHandling:
    def test_footer_and_short_rows_are_skipped(self, config):
        batch = parse(
            ["שם התלמיד", "אנגלית"],
            [["דני כהן", "איחור1"], ['סה"כ', "איחור9"], ["א", "איחור1"], [None, "איחור1"]],
            config,
        )
        assert list(batch) == ["דני כהן"]

    def test_duplicate_name_replaces_earlier_row(self, config):
        batch = parse(
            ["שם התלמיד", "אנגלית"],
            [["דני כהן", "איחור2"], ["רות לוי", "איחור1"], ["דני כהן", "חיסור1"]],
            config,
        )
        assert list(batch) == ["דני כהן", "רות לוי"]
        rec = batch["דני כהן"]
        assert [e.action for e in rec.logs] == ["חיסור"]
        assert rec.total == -1.0

    def test_duplicate_name_keeps_last_nonempty_contacts(self, config):
        batch = parse(
            ["שם התלמיד", "נייד אמא", "נייד אבא"],
            [["דני כהן", "0501", "0502"], ["דני כהן", None, "0509"]],
            config,
        )
        assert batch["דני כהן"].contacts == {"mother_phone": "0501", "father_phone": "0509"}

    def test_first_and_last_name_columns(self, config):
        batch = parse(["שם פרטי", "שם משפחה", "אנגלית"], [["דני", "כהן", "איחור1"]], config)
        assert list(batch) == ["דני כהן"]

    def test_batch_preview_frame(self, config):
        batch = parse(["שם התלמיד", "אנגלית"], [["דני כהן", "איחור2"]], config)
        df = batch_to_frame(batch)
        assert df["שם"].tolist() == ["דני כהן"]
        assert df["ניקוד"].tolist() == [-2.0]
