"""Output directory and file helpers"""

import shutil
from pathlib import Path


def prepare_out_dir(out_dir: Path) -> None:
    """Remove and recreate out_dir so no stale files survive a rebuild."""
    if out_dir.exists():
        shutil.rmtree(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)


def write_output_file(path: Path, content: str) -> None:
    """Write UTF-8 text, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')


def read_text_file(path: Path) -> str:
    return Path(path).read_text(encoding='utf-8')
