from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .files import Owner, chown_tree, remove_tree

logger = logging.getLogger(__name__)


def copy_tree(
    src: str | Path,
    dst: str | Path,
    *,
    owner: Optional[Owner] = None,
    replace: bool = False,
    dry_run: bool = False,
) -> None:
    """Copy the contents of ``src`` into ``dst`` (cp -rT), overwriting files.

    ``replace`` removes ``dst`` first so stale files from an older copy do not linger.
    With ``owner`` every directory this call creates, missing parents of ``dst``
    included, is handed to that owner along with the copied tree.
    """

    s = Path(src)
    d = Path(dst)
    if not s.exists():
        raise FileNotFoundError(str(src))

    if dry_run:
        logger.info("Would copy tree %s -> %s", str(s), str(d))
        return

    if replace:
        remove_tree(d)

    # highest directory this call creates (or dst itself)
    top = d
    while not top.parent.exists():
        top = top.parent

    d.mkdir(parents=True, exist_ok=True)
    for item in s.rglob("*"):
        rel = item.relative_to(s)
        out = d / rel
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        else:
            out.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)

    if owner is not None:
        chown_tree(top, owner)
    logger.info("Copied %s -> %s", str(s), str(d))
