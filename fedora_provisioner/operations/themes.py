from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from ..lib.assets import copy_tree
from ..lib.command import run_as_user, run_cmd
from ..lib.files import chown_tree, ensure_dir, write_file
from ..lib.git import shallow_clone
from ..operation import Operation, requires_binary, succeeded
from ..retry import FailurePolicy
from .context import BuildCtx

logger = logging.getLogger(__name__)

# (source subdir under <theme>/kde, destination relative to the user's home)
KDE_USER_ASSETS: Tuple[Tuple[str, str], ...] = (
    ("colorschemes", ".local/share/color-schemes"),
    ("aurorae/{name}", ".local/share/aurorae/themes/{name}"),
    ("kvantum", ".config/Kvantum"),
    ("plasma/look-and-feel", ".local/share/plasma/look-and-feel"),
    ("konsole", ".local/share/konsole"),
    ("folders", ".local/share/icons/{name}-folders"),
)

KDE_USER_DIRS: Tuple[str, ...] = (
    ".local/share/color-schemes",
    ".local/share/plasma/look-and-feel",
    ".local/share/konsole",
    ".local/share/aurorae/themes",
    ".config/Kvantum",
    ".local/share/icons",
)

SYSTEM_ICONS_DIR = "/usr/share/icons"
SDDM_THEMES_DIR = "/usr/share/sddm/themes"
SDDM_CONF = "/etc/sddm.conf.d/10-theme.conf"


def icon_operations(ctx: BuildCtx) -> List[Operation]:
    section = ctx.cfg.section("icons")
    repo = section.get("repo")
    if not repo:
        return []
    name = str(section.get("name") or "icons")
    args = ctx.cfg.str_list("install_args", within=section)
    checkout = ctx.work_dir / f"{name}-icon-theme"

    def install() -> None:
        shallow_clone(str(repo), checkout, dry_run=ctx.dry_run)
        run_cmd(["./install.sh", *args], cwd=str(checkout), dry_run=ctx.dry_run)

    return [
        Operation(
            f"icons.{name.lower()}",
            f"Installing {name} icon theme",
            install,
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("theme",),
        ),
        Operation(
            f"icons.{name.lower()}.select",
            f"Selecting {name} icon theme",
            lambda: run_cmd(
                ["sudo", "-u", ctx.facts.user, "dbus-launch", "gsettings", "set",
                 "org.gnome.desktop.interface", "icon-theme", name],
                dry_run=ctx.dry_run,
            ),
            failure_policy=FailurePolicy.INTERACTIVE,
            applicable=requires_binary("gsettings"),
            tags=("theme",),
        ),
    ]


def kde_operations(ctx: BuildCtx) -> List[Operation]:
    """Fetch a KDE theme and copy whichever asset directories it ships.

    Missing asset directories are not an error; themes vary in what they ship.
    """

    section = ctx.cfg.section("kde_theme")
    repo = section.get("repo")
    if not repo:
        return []
    name = str(section.get("name") or "theme")
    key = name.lower()
    checkout = ctx.work_dir / name
    kde = checkout / "kde"
    home = ctx.home
    owner = ctx.facts.owner
    user = ctx.facts.user

    def fetch() -> None:
        ensure_dir(ctx.work_dir, dry_run=ctx.dry_run)
        shallow_clone(str(repo), checkout, dry_run=ctx.dry_run)

    def user_dirs() -> None:
        for rel in KDE_USER_DIRS:
            ensure_dir(home / rel, owner=owner, dry_run=ctx.dry_run)
        chown_tree(home / ".local", owner, dry_run=ctx.dry_run)
        chown_tree(home / ".config", owner, dry_run=ctx.dry_run)

    def user_assets():
        copied = []
        for src_rel, dst_rel in KDE_USER_ASSETS:
            src = kde / src_rel.format(name=name)
            if not src.is_dir():
                continue
            copy_tree(src, home / dst_rel.format(name=name), owner=owner, dry_run=ctx.dry_run)
            copied.append(src_rel.split("/")[0])
        return succeeded(", ".join(copied) or "nothing to copy")

    def kvantum_config():
        kvantum_theme = section.get("kvantum_theme")
        if not kvantum_theme or not (kde / "kvantum").is_dir():
            return succeeded("no kvantum theme")
        p = home / ".config/Kvantum/kvantum.kvconfig"
        write_file(p, f"[General]\ntheme={kvantum_theme}\n", dry_run=ctx.dry_run)
        if not ctx.dry_run:
            chown_tree(p, owner)
        return succeeded()

    def look_and_feel():
        package = section.get("look_and_feel")
        if not package or not (kde / "plasma/look-and-feel").is_dir():
            return succeeded("no look-and-feel package")
        run_cmd(["sudo", "-u", user, "dbus-launch", "lookandfeeltool", "-a", str(package)], dry_run=ctx.dry_run)
        return succeeded()

    def system_assets():
        done = []
        if (kde / "cursors").is_dir():
            copy_tree(kde / "cursors", Path(SYSTEM_ICONS_DIR) / name, replace=True, dry_run=ctx.dry_run)
            done.append("cursors")
        if (kde / "sddm").is_dir():
            copy_tree(kde / "sddm", Path(SDDM_THEMES_DIR) / name, replace=True, dry_run=ctx.dry_run)
            write_file(SDDM_CONF, f"[Theme]\nCurrent={name}\n", dry_run=ctx.dry_run)
            done.append("sddm")
        return succeeded(", ".join(done) or "nothing to copy")

    def icon_cache():
        target = Path(SYSTEM_ICONS_DIR) / name
        if not target.is_dir():
            return succeeded("no cursor theme installed")
        run_cmd(["gtk-update-icon-cache", "-f", str(target)], dry_run=ctx.dry_run)
        return succeeded()

    return [
        Operation(
            f"kde.{key}.fetch",
            f"Fetching {name} (KDE) theme",
            fetch,
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.user-dirs",
            f"Creating theme directories in {home}",
            user_dirs,
            failure_policy=FailurePolicy.ABORT,
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.user-assets",
            f"Copying {name} assets for {user}",
            user_assets,
            failure_policy=FailurePolicy.ABORT,
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.kvantum",
            f"Selecting Kvantum theme for {user}",
            kvantum_config,
            failure_policy=FailurePolicy.ABORT,
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.look-and-feel",
            f"Applying {name} look-and-feel",
            look_and_feel,
            failure_policy=FailurePolicy.INTERACTIVE,
            applicable=requires_binary("lookandfeeltool"),
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.system-assets",
            f"Installing {name} cursors and login theme",
            system_assets,
            failure_policy=FailurePolicy.ABORT,
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.icon-cache",
            "Updating icon cache",
            icon_cache,
            failure_policy=FailurePolicy.WARN,
            applicable=requires_binary("gtk-update-icon-cache"),
            tags=("theme",),
        ),
        Operation(
            f"kde.{key}.font-cache",
            "Rebuilding font cache",
            lambda: run_as_user(user, "fc-cache -f", dry_run=ctx.dry_run),
            failure_policy=FailurePolicy.INTERACTIVE,
            tags=("theme",),
        ),
    ]

