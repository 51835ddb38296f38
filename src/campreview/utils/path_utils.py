"""Path and file utilities."""

from pathlib import Path
from typing import Collection, Union


def ensure_dir(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object pointing to the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def unique_path(path: Union[str, Path], taken: Collection[Path] = ()) -> Path:
    """
    Return ``path`` itself, or the first free ``<stem>-<n><suffix>`` sibling.

    Args:
        path: Desired file path
        taken: Paths to treat as occupied even if not on disk yet

    Returns:
        A path that neither exists nor is in ``taken``
    """
    path = Path(path)

    def free(p: Path) -> bool:
        return p not in taken and not p.exists()

    if free(path):
        return path

    n = 1
    while True:
        candidate = path.with_name(f"{path.stem}-{n}{path.suffix}")
        if free(candidate):
            return candidate
        n += 1
