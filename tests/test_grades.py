from classbank.grades import parse_grades_table
from classbank.records import GradeEntry

from conftest import make_table


class TestParseGradesTable:
    def test_numeric_cells_become_grades(self):
        table = make_table(
            ["מס", "שם התלמיד", "מתמטיקה", "אנגלית ", "הערות", "נייד אמא"],
            [
                [1, "דני כהן", 90, "85", "לא נבחן", "0501234567"],
                [2, "רות לוי", None, 77.5, None, None],
                [None, 'סה"כ', 167, None, None, None],
            ],
        )
        grades = parse_grades_table(table)

        assert grades == {
            "דני כהן": [GradeEntry("מתמטיקה", 90.0), GradeEntry("אנגלית", 85.0)],
            "רות לוי": [GradeEntry("אנגלית", 77.5)],
        }

    def test_student_without_grades_gets_empty_list(self):
        table = make_table(["שם התלמיד", "מתמטיקה"], [["דני כהן", "פטור"]])
        assert parse_grades_table(table) == {"דני כהן": []}

    def test_later_duplicate_row_wins(self):
        table = make_table(["שם התלמיד", "מתמטיקה"], [["דני כהן", 60], ["דני כהן", 95]])
        assert parse_grades_table(table) == {"דני כהן": [GradeEntry("מתמטיקה", 95.0)]}

    def test_english_name_header(self):
        table = make_table(["Name", "Math"], [["Dan Cohen", 88]])
        assert parse_grades_table(table) == {"Dan Cohen": [GradeEntry("Math", 88.0)]}
