"""
Модель данных: записи учеников, строки журнала (логи), оценки.

Всё, что приходит из JSON (хранилище, бэкап), разбирается поле за полем:
неизвестные поля сохраняются в `extra` и переживают загрузку/сохранение,
не-объекты отбрасываются.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional
from .utils import is_empty, parse_float

CONTACT_FIELDS = (
    "student_cell",
    "student_email",
    "home_phone",
    "mother_name",
    "mother_phone",
    "mother_email",
    "father_name",
    "father_phone",
    "father_email",
)

PHONE_FIELDS = ("student_cell", "home_phone", "mother_phone", "father_phone")


def _as_float(x: Any, default: float = 0.0) -> float:
    v = parse_float(x)
    return default if v is None else v

def _as_str(x: Any) -> str:
    if is_empty(x):
        return ""
    return str(x).strip()


@dataclass
class LogEntry:
    subject: str
    teacher: str
    action: str
    count: float
    score: float  # = балл за единицу * count
    date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "teacher": self.teacher,
            "action": self.action,
            "count": self.count,
            "score": self.score,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, obj: Any) -> Optional["LogEntry"]:
        if not isinstance(obj, dict):
            return None
        action = _as_str(obj.get("action"))
        if not action:
            return None
        return cls(
            subject=_as_str(obj.get("subject")),
            teacher=_as_str(obj.get("teacher")),
            action=action,
            count=_as_float(obj.get("count"), 0.0),
            score=_as_float(obj.get("score"), 0.0),
            date=_as_str(obj.get("date")),
        )


@dataclass
class GradeEntry:
    subject: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"subject": self.subject, "score": self.score}

    @classmethod
    def from_dict(cls, obj: Any) -> Optional["GradeEntry"]:
        if not isinstance(obj, dict):
            return None
        subject = _as_str(obj.get("subject"))
        score = parse_float(obj.get("score"))
        if not subject or score is None:
            return None
        return cls(subject, score)


def _logs_from(obj: Any) -> List[LogEntry]:
    if not isinstance(obj, list):
        return []
    out = []
    for item in obj:
        e = LogEntry.from_dict(item)
        if e is not None:
            out.append(e)
    return out


@dataclass
class StudentRecord:
    name: str
    total: float = 0.0
    logs: List[LogEntry] = field(default_factory=list)

    student_cell: str = ""
    student_email: str = ""
    home_phone: str = ""
    mother_name: str = ""
    mother_phone: str = ""
    mother_email: str = ""
    father_name: str = ""
    father_phone: str = ""
    father_email: str = ""

    # снимок полугодия: заменяется целиком при каждом импорте
    semester_score: Optional[float] = None
    semester_logs: Optional[List[LogEntry]] = None
    grades: Optional[List[GradeEntry]] = None

    hidden_from_podium: bool = False
    certificate_comment: str = ""
    academic_reinforcement: str = ""

    # покупки/заявки/челленджи и прочее - не трогаем, но сохраняем
    extra: Dict[str, Any] = field(default_factory=dict)

    def contacts(self) -> Dict[str, str]:
        return {f: getattr(self, f) for f in CONTACT_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update({
            "name": self.name,
            "total": self.total,
            "logs": [e.to_dict() for e in self.logs],
        })
        for f in CONTACT_FIELDS:
            if getattr(self, f):
                out[f] = getattr(self, f)
        if self.semester_score is not None:
            out["semester_score"] = self.semester_score
        if self.semester_logs is not None:
            out["semester_logs"] = [e.to_dict() for e in self.semester_logs]
        if self.grades is not None:
            out["grades"] = [g.to_dict() for g in self.grades]
        if self.hidden_from_podium:
            out["hidden_from_podium"] = True
        if self.certificate_comment:
            out["certificate_comment"] = self.certificate_comment
        if self.academic_reinforcement:
            out["academic_reinforcement"] = self.academic_reinforcement
        return out

    @classmethod
    def from_dict(cls, obj: Any, name: Optional[str] = None) -> Optional["StudentRecord"]:
        """
        Приводит сохранённую запись к ожидаемому формату.
        name - ключ хранилища; он главнее поля "name" внутри записи.
        """
        if not isinstance(obj, dict):
            return None
        nm = _as_str(name) or _as_str(obj.get("name"))
        if not nm:
            return None

        known = {
            "name", "total", "logs", "semester_score", "semester_logs", "grades",
            "hidden_from_podium", "certificate_comment", "academic_reinforcement",
            *CONTACT_FIELDS,
        }
        rec = cls(
            name=nm,
            total=_as_float(obj.get("total"), 0.0),
            logs=_logs_from(obj.get("logs")),
            hidden_from_podium=bool(obj.get("hidden_from_podium", False)),
            certificate_comment=_as_str(obj.get("certificate_comment")),
            academic_reinforcement=_as_str(obj.get("academic_reinforcement")),
            extra={k: v for k, v in obj.items() if k not in known},
        )
        for f in CONTACT_FIELDS:
            setattr(rec, f, _as_str(obj.get(f)))

        if "semester_score" in obj:
            rec.semester_score = parse_float(obj.get("semester_score"))
        if isinstance(obj.get("semester_logs"), list):
            rec.semester_logs = _logs_from(obj.get("semester_logs"))
        if isinstance(obj.get("grades"), list):
            grades = [GradeEntry.from_dict(g) for g in obj["grades"]]
            rec.grades = [g for g in grades if g is not None]
        return rec


@dataclass
class StudentUpdate:
    """
    Частичное обновление ученика, полученное из одной таблицы (ещё не слито с хранилищем).
    contacts - только непустые значения.
    explicit_total - итог, взятый из колонки "סה"כ"/"ציון" и т.п. (обходит сумму логов).
    """
    name: str
    total: float = 0.0
    logs: List[LogEntry] = field(default_factory=list)
    contacts: Dict[str, str] = field(default_factory=dict)
    explicit_total: Optional[float] = None

    def add_log(self, entry: LogEntry) -> None:
        self.logs.append(entry)
        self.total += entry.score

    def to_record(self) -> StudentRecord:
        rec = StudentRecord(name=self.name, total=self.total, logs=list(self.logs))
        for f, v in self.contacts.items():
            if f in CONTACT_FIELDS:
                setattr(rec, f, v)
        return rec


# имя -> обновление, в порядке появления в таблице
ImportBatch = Dict[str, StudentUpdate]
# имя -> запись; владелец - вызывающий код
Store = Dict[str, StudentRecord]


def add_log(record: StudentRecord, entry: LogEntry) -> StudentRecord:
    # ручное начисление: новая запись, итог меняется на балл строки
    return replace(record, logs=[*record.logs, entry], total=record.total + entry.score)

def remove_log(record: StudentRecord, index: int) -> StudentRecord:
    if index < 0 or index >= len(record.logs):
        raise IndexError(f"Нет строки журнала #{index} у {record.name}")
    logs = list(record.logs)
    removed = logs.pop(index)
    return replace(record, logs=logs, total=record.total - removed.score)
