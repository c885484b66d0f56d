"""
Конфигурация импорта.

ImportConfig - неизменяемое значение, которое явно передаётся в каждый вызов
пайплайна. Никакого общего изменяемого "конфига по умолчанию": проверка
"это всё ещё дефолт?" делается сравнением содержимого (is_default()).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple
from .utils import config_path, is_number, load_json, save_json

logger = logging.getLogger(__name__)

DEFAULT_TEACHER = "צוות"

DEFAULT_ACTION_SCORES: Mapping[str, float] = MappingProxyType({
    # положительные (+1)
    "מילה טובה": 1,
    "הצטיינות": 1,
    "שיתוף פעולה": 1,
    "שותף במהלך השיעור": 1,
    "עזרה לחבר": 1,
    "יוזמה": 1,
    "הגעה בזמן": 1,
    "השתתפות": 1,
    "שיעורי בית": 1,
    "תפילה": 1,
    "תפילת מנחה": 1,

    # отрицательные (-1)
    "איחור": -1,
    "חיסור": -1,
    "אי הבאת ציוד": -1,
    "הפרעה": -1,
    "הפרעה במהלך שיעור": -1,
    "פטפוט": -1,
    "שוטטות": -1,
    "אי השתתפות": -1,
    "חוצפה": -1,
    "סרבנות": -1,
    "חוצפה/סרבנות": -1,
})


def _ordered_actions(scores: Mapping[str, float]) -> Tuple[str, ...]:
    # длинные названия первыми: "הפרעה במהלך שיעור" не должна теряться за "הפרעה"
    return tuple(sorted(scores.keys(), key=len, reverse=True))


@dataclass(frozen=True)
class ImportConfig:
    action_scores: Mapping[str, float] = field(default_factory=lambda: DEFAULT_ACTION_SCORES)
    default_teacher: str = DEFAULT_TEACHER
    max_header_scan_rows: int = 80
    ordered_actions: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        scores = MappingProxyType(dict(self.action_scores))
        object.__setattr__(self, "action_scores", scores)
        object.__setattr__(self, "ordered_actions", _ordered_actions(scores))

    def score_of(self, action: str) -> float:
        return float(self.action_scores[action])

    def is_default(self) -> bool:
        return dict(self.action_scores) == dict(DEFAULT_ACTION_SCORES)

    def with_action(self, action: str, score: float) -> "ImportConfig":
        scores = dict(self.action_scores)
        scores[action] = score
        return ImportConfig(scores, self.default_teacher, self.max_header_scan_rows)

    def with_scores(self, scores: Mapping[str, float]) -> "ImportConfig":
        # весь словарь действий целиком (редактор таблицы баллов)
        return ImportConfig(scores, self.default_teacher, self.max_header_scan_rows)

    def without_action(self, action: str) -> "ImportConfig":
        scores = {k: v for k, v in self.action_scores.items() if k != action}
        return ImportConfig(scores, self.default_teacher, self.max_header_scan_rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_scores": dict(self.action_scores),
            "default_teacher": self.default_teacher,
            "max_header_scan_rows": self.max_header_scan_rows,
        }


def _clean_scores(obj: Any) -> Optional[Dict[str, float]]:
    # только объект {строка: число}; всё остальное отбрасываем
    if not isinstance(obj, dict):
        return None
    out: Dict[str, float] = {}
    for k, v in obj.items():
        name = str(k).strip()
        if not name or not is_number(v):
            logger.debug("Пропущено действие %r=%r", k, v)
            continue
        out[name] = float(v)
    return out


def config_from_dict(obj: Any) -> ImportConfig:
    """
    Разбирает сохранённый/загруженный JSON конфига поле за полем.
    Массив, null, строка и т.п. -> конфиг по умолчанию (никогда не "разворачиваем" их в запись).
    """
    if not isinstance(obj, dict):
        if obj is not None:
            logger.warning("Конфиг не является объектом (%s) - используется конфиг по умолчанию", type(obj).__name__)
        return ImportConfig()

    scores = _clean_scores(obj.get("action_scores"))
    if scores is None:
        scores = dict(DEFAULT_ACTION_SCORES)

    teacher = str(obj.get("default_teacher") or "").strip() or DEFAULT_TEACHER

    scan = obj.get("max_header_scan_rows")
    scan_rows = int(scan) if is_number(scan) and scan >= 1 else 80

    return ImportConfig(scores, teacher, scan_rows)


def load_config(path: Optional[Path] = None) -> ImportConfig:
    return config_from_dict(load_json(path or config_path(), None))


def save_config(config: ImportConfig, path: Optional[Path] = None) -> None:
    save_json(path or config_path(), config.to_dict())
