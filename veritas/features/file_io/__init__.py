"""File IO feature."""

from veritas.features.file_io.read_file_handler import ReadFileHandler, read_media_file

__all__ = ["ReadFileHandler", "read_media_file"]
