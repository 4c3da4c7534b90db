import os
from datetime import date
from typing import Optional

EXPORT_PREFIX = "InterpreSure_Annotations_edited"


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{EXPORT_PREFIX}_{day.isoformat()}.csv"


class UnsupportedFileType(ValueError):
    pass


class FileTypeHandler:
    """Reads uploaded CSV files and writes exported text. UTF-8 only."""

    def __init__(self, path: str):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()

        if self.ext != ".csv":
            raise UnsupportedFileType(f"Unsupported file type '{self.ext or path}' (use .csv)")

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()

    def save(self, text: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(text)

    @classmethod
    def for_export(cls, target: Optional[str] = None, day: Optional[date] = None) -> "FileTypeHandler":
        """``target`` may be a directory, a file path, or None for the cwd."""
        name = export_filename(day)
        if not target:
            return cls(name)
        if os.path.isdir(target):
            return cls(os.path.join(target, name))
        return cls(target)
