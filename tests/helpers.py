"""Filesystem helpers for building and comparing directory trees in tests."""
import os
from pathlib import Path
from typing import Dict, Union


def write_tree(root: Path, files: Dict[str, Union[str, bytes]]) -> None:
    """Create files (and their parent directories) under root."""
    for relpath, content in files.items():
        path = root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)


def tree_state(root: Path) -> Dict[str, object]:
    """Everything under root: relative path -> bytes, 'dir' or ('link', target)."""
    state: Dict[str, object] = {}
    if not root.exists():
        return state
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = Path(dirpath) / name
            rel = str(path.relative_to(root))
            if path.is_symlink():
                state[rel] = ("link", os.readlink(path))
            elif path.is_dir():
                state[rel] = "dir"
            else:
                state[rel] = path.read_bytes()
    return state
