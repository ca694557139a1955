"""
BaseHandler - базовый класс для шагов пайплайна с контрактами.

Handler получает context dict и возвращает его обновлённым.
Контракт задаётся атрибутами класса:
- requires: ключи, без которых шаг не может выполниться
- provides: ключи, которые шаг добавляет

handle() асинхронный: шаги ждут декодер и удалённую модель,
не блокируя event loop.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, FrozenSet

from veritas.models.keys import Key


class BaseHandler(ABC):
    """Base handler interface с поддержкой контрактов."""

    requires: ClassVar[FrozenSet[Key]] = frozenset()
    provides: ClassVar[FrozenSet[Key]] = frozenset()

    # Сообщение о прогрессе, пока шаг выполняется (None = не сообщать)
    progress_message: ClassVar[str | None] = None

    @property
    def name(self) -> str:
        """Имя handler'а (по умолчанию имя класса)."""
        return self.__class__.__name__

    def missing_requirements(self, context: dict[str, Any]) -> list[str]:
        """Возвращает список отсутствующих requires ключей."""
        return sorted(k.value for k in self.requires if context.get(k.value) is None)

    def should_run(self, context: dict[str, Any]) -> bool:
        """Опциональные шаги переопределяют, чтобы пропускаться."""
        return True

    @abstractmethod
    async def handle(self, context: dict[str, Any]) -> dict[str, Any]:
        """Обрабатывает контекст и возвращает обновлённый контекст."""
        raise NotImplementedError


class ExtractorHandler(BaseHandler):
    """Базовый класс для Extractor handlers (I/O, декодирование)."""
    pass


class AnalyzerHandler(BaseHandler):
    """Базовый класс для Analyzer handlers (обращение к удалённой модели)."""
    pass
