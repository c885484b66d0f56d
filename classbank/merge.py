"""
Слияние разобранного batch с хранилищем учеников.

Три политики, выбираются вызывающим кодом по типу импорта:
  behavior - итог складывается, логи дописываются в конец;
  contacts - контакты перезаписываются только непустыми значениями, итог/логи не трогаются;
  semester - снимок полугодия (semester_score/semester_logs) заменяется целиком.
Ученик, которого нет в хранилище, создаётся из batch.

Функции чистые: возвращают новый словарь, входные записи не меняются.
"""
from __future__ import annotations
import logging
from dataclasses import replace
from enum import Enum
from typing import List, Mapping, Union
from .errors import UnknownPolicyError
from .records import CONTACT_FIELDS, GradeEntry, ImportBatch, Store, StudentRecord

logger = logging.getLogger(__name__)


class MergePolicy(str, Enum):
    BEHAVIOR = "behavior"
    CONTACTS = "contacts"
    SEMESTER = "semester"


def merge_behavior(store: Mapping[str, StudentRecord], batch: ImportBatch) -> Store:
    out = dict(store)
    for name, upd in batch.items():
        old = out.get(name)
        if old is None:
            out[name] = upd.to_record()
            continue
        out[name] = replace(old, total=old.total + upd.total, logs=[*old.logs, *upd.logs])
    return out


def merge_contacts(store: Mapping[str, StudentRecord], batch: ImportBatch) -> Store:
    out = dict(store)
    for name, upd in batch.items():
        old = out.get(name)
        if old is None:
            out[name] = upd.to_record()
            continue
        # пустое значение в файле не стирает то, что уже есть
        changes = {f: v for f, v in upd.contacts.items() if f in CONTACT_FIELDS and v}
        out[name] = replace(old, **changes)
    return out


def merge_semester(store: Mapping[str, StudentRecord], batch: ImportBatch) -> Store:
    out = dict(store)
    for name, upd in batch.items():
        old = out.get(name)
        if old is None:
            old = replace(upd.to_record(), total=0.0, logs=[])
        out[name] = replace(old, semester_score=upd.total, semester_logs=list(upd.logs))
    return out


_POLICIES = {
    MergePolicy.BEHAVIOR: merge_behavior,
    MergePolicy.CONTACTS: merge_contacts,
    MergePolicy.SEMESTER: merge_semester,
}


def as_policy(policy: Union[MergePolicy, str]) -> MergePolicy:
    try:
        return MergePolicy(policy)
    except ValueError:
        raise UnknownPolicyError(policy) from None


def merge_batch(store: Mapping[str, StudentRecord], batch: ImportBatch, policy: Union[MergePolicy, str]) -> Store:
    pol = as_policy(policy)
    new_names = sum(1 for n in batch if n not in store)
    out = _POLICIES[pol](store, batch)
    logger.info("Слияние (%s): %d учеников в файле, новых %d", pol.value, len(batch), new_names)
    return out


def merge_grades(store: Mapping[str, StudentRecord], grades: Mapping[str, List[GradeEntry]]) -> Store:
    # оценки - снимок: каждый импорт заменяет список целиком
    out = dict(store)
    for name, entries in grades.items():
        old = out.get(name)
        if old is None:
            old = StudentRecord(name=name)
        out[name] = replace(old, grades=list(entries))
    logger.info("Оценки обновлены: %d учеников", len(grades))
    return out
