from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

Owner = Tuple[int, int]


def chown_tree(path: str | Path, owner: Owner, *, dry_run: bool = False) -> None:
    """chown -R equivalent."""
    p = Path(path)
    if dry_run:
        logger.info("Would chown -R %s:%s %s", owner[0], owner[1], str(p))
        return
    uid, gid = owner
    os.chown(p, uid, gid, follow_symlinks=False)
    if p.is_dir() and not p.is_symlink():
        for root, dirs, files in os.walk(p):
            for name in dirs + files:
                os.chown(os.path.join(root, name), uid, gid, follow_symlinks=False)


def ensure_dir(
    path: str | Path,
    *,
    mode: int = 0o755,
    owner: Optional[Owner] = None,
    dry_run: bool = False,
) -> Path:
    """install -d -m MODE equivalent, with optional ownership of the leaf."""

    p = Path(path)
    if dry_run:
        logger.info("Would create %s (mode=%o)", str(p), mode)
        return p
    p.mkdir(parents=True, exist_ok=True)
    os.chmod(p, mode)
    if owner is not None:
        os.chown(p, owner[0], owner[1])
    return p


def write_file(path: str | Path, contents: str, *, mode: int | None = None, dry_run: bool = False) -> bool:
    """Write ``contents`` unless the file already holds exactly that. Returns True if written."""

    p = Path(path)
    if p.exists() and p.read_text(encoding="utf-8") == contents:
        logger.debug("Unchanged %s", str(p))
        return False
    if dry_run:
        logger.info("Would write %s", str(p))
        return True
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    if mode is not None:
        os.chmod(p, mode)
    logger.info("Wrote %s", str(p))
    return True


def append_line_if_absent(
    path: str | Path,
    line: str,
    *,
    match_prefix: str | None = None,
    dry_run: bool = False,
) -> bool:
    """Append ``line`` unless the file already has it.

    With ``match_prefix`` any existing line starting with that prefix counts as
    present (e.g. ``max_parallel_downloads=``), so an operator's own value wins.
    Returns True if the file was changed.
    """

    p = Path(path)
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    for current in existing.splitlines():
        if current == line or (match_prefix is not None and current.startswith(match_prefix)):
            return False

    if dry_run:
        logger.info("Would append %r to %s", line, str(p))
        return True

    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    logger.info("Appended %r to %s", line, str(p))
    return True


def backup_file(path: str | Path, *, dry_run: bool = False) -> Optional[Path]:
    """Copy ``path`` to ``path.bak`` once.

    An existing backup is never overwritten, so the first backup taken on this
    host stays the pristine copy. Returns the backup path if one was created.
    """

    p = Path(path)
    bak = p.with_name(p.name + ".bak")
    if not p.is_file() or bak.exists():
        return None
    if dry_run:
        logger.info("Would back up %s -> %s", str(p), str(bak))
        return bak
    shutil.copy2(p, bak)
    logger.info("Backed up %s -> %s", str(p), str(bak))
    return bak


def remove_tree(path: str | Path, *, dry_run: bool = False) -> None:
    p = Path(path)
    if not p.exists() and not p.is_symlink():
        return
    if dry_run:
        logger.info("Would remove %s", str(p))
        return
    if p.is_dir() and not p.is_symlink():
        shutil.rmtree(p)
    else:
        p.unlink()
