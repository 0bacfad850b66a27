from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from domain.models import SvgDocument
from domain.ports.repositories import SvgRepository


class FileSystemSvgRepository(SvgRepository):
    def save(self, document: SvgDocument, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            tmp_path = path.with_suffix(f"{path.suffix}.tmp")
            tmp_path.write_text(document.text, encoding="utf-8")
            tmp_path.replace(path)
