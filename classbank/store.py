from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
from .config import ImportConfig, config_from_dict
from .records import Store, StudentRecord
from .utils import load_json, save_json, store_path

logger = logging.getLogger(__name__)


def store_from_dict(obj: Any) -> Store:
    # {имя: запись}; мусор (массивы, null, не-объекты) отбрасываем
    if not isinstance(obj, dict):
        if obj is not None:
            logger.warning("Хранилище не является объектом (%s) - начинаем с пустого", type(obj).__name__)
        return {}
    out: Store = {}
    for key, item in obj.items():
        rec = StudentRecord.from_dict(item, name=str(key))
        if rec is None:
            logger.debug("Запись %r пропущена: не объект", key)
            continue
        out[rec.name] = rec
    return out


def store_to_dict(store: Mapping[str, StudentRecord]) -> Dict[str, Any]:
    return {name: rec.to_dict() for name, rec in store.items()}


def load_store(path: Optional[Path] = None) -> Store:
    # Читает базу учеников из students.json
    return store_from_dict(load_json(path or store_path(), {}))


def save_store(store: Mapping[str, StudentRecord], path: Optional[Path] = None) -> None:
    save_json(path or store_path(), store_to_dict(store))


def dump_backup(store: Mapping[str, StudentRecord], config: ImportConfig) -> bytes:
    # файл резервной копии: {"db": ..., "config": ...}
    payload = {"db": store_to_dict(store), "config": config.to_dict()}
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


def load_backup(data: bytes) -> Tuple[Store, ImportConfig]:
    """
    Разбирает файл резервной копии. Ошибка JSON -> ValueError;
    неверная форма частей -> пустое хранилище / конфиг по умолчанию.
    """
    obj = json.loads(data.decode("utf-8-sig"))
    if not isinstance(obj, dict):
        raise ValueError("Резервная копия должна быть JSON-объектом")
    return store_from_dict(obj.get("db")), config_from_dict(obj.get("config"))
