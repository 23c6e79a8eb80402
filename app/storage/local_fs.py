from pathlib import Path
from typing import Iterable


class LocalFS:
    def __init__(self, root: Path):
        self.root = Path(root)

    def glob_videos(self, rel: str | Path = ".", exts: Iterable[str] = (".mp4", ".mov", ".mkv", ".webm", ".avi")):
        base = (self.root / rel).resolve()
        for p in sorted(base.rglob("*")):
            if p.suffix.lower() in exts:
                yield p

    def write_text(self, name: str, text: str) -> Path:
        p = (self.root / name).resolve()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p

    def rel_from(self, p: Path) -> str:
        return str(p.resolve().relative_to(self.root.resolve()))
