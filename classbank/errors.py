from __future__ import annotations


class ClassbankError(Exception):
    """Базовая ошибка пакета."""


class WorkbookReadError(ClassbankError):
    # Файл не удалось прочитать как таблицу (битый xlsx, не таблица вообще, пустой файл)
    def __init__(self, source_name: str, reason: str = ""):
        self.source_name = source_name
        self.reason = reason
        msg = f"Не удалось прочитать таблицу: {source_name or '<bytes>'}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class UnknownPolicyError(ClassbankError, ValueError):
    def __init__(self, policy):
        self.policy = policy
        super().__init__(f"Неизвестная политика слияния: {policy!r}")
