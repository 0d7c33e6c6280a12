"""
file_reader.py - Read files out of an extracted package.

A missing file is ordinary data here, not an exception: callers get None
and decide what it means.
"""

from pathlib import Path
from typing import Optional, Union


def get_file_content(workdir: Union[str, Path], path: str) -> Optional[bytes]:
    """
    Return the content of a file given by its path inside workdir.

    Args:
        workdir: Extracted package root
        path: Path relative to workdir (as written in the manifest)

    Returns:
        File bytes, or None if the path is missing, not a regular file,
        unreadable, or escapes workdir
    """
    if not path:
        return None

    root = Path(workdir).resolve()
    full_path = (root / path.replace("\\", "/")).resolve()

    # SECURITY: Manifest hrefs must stay inside the package
    try:
        full_path.relative_to(root)
    except ValueError:
        return None

    if not full_path.is_file():
        return None

    try:
        return full_path.read_bytes()
    except OSError:
        return None
