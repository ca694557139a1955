"""Configuration package.

Экспортирует:
- VeritasSettings: настройки из env (VERITAS_*) и .env
- Context, build_initial_context: начальный контекст пайплайна
"""

from veritas.config.settings import Context, VeritasSettings, build_initial_context

__all__ = [
    "Context",
    "VeritasSettings",
    "build_initial_context",
]
