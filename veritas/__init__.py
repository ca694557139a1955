"""Veritas - проверка медиа файлов на манипуляции и AI генерацию."""

__version__ = "1.0.0"
