from __future__ import annotations

import shlex
from typing import List

from ..errors import ConfigurationError
from ..lib import pkg
from ..lib.command import run_as_user
from ..lib.files import chown_tree, ensure_dir
from ..operation import BatchMode, Operation, batch_operation, succeeded
from ..retry import FailurePolicy
from .context import BuildCtx

FONTS_REL = ".local/share/fonts"

_ARCHIVE_SCRIPT = """\
set -e
tmp=$(mktemp -d)
trap 'rm -rf "$tmp"' EXIT
wget -q -O "$tmp/fonts.zip" {url}
unzip -q -o "$tmp/fonts.zip" -d {dest}
"""


def _repo_dirname(url: str) -> str:
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name[:-4] if name.endswith(".git") else name


def build(ctx: BuildCtx) -> List[Operation]:
    section = ctx.cfg.section("fonts")
    user = ctx.facts.user
    fonts_dir = ctx.home / FONTS_REL
    ops: List[Operation] = []

    for entry in ctx.cfg.entries("rpms", within=section):
        name, url = str(entry["name"]), str(entry["url"])

        def install_rpm(name: str = name, url: str = url):
            if pkg.rpm_is_installed(name, dry_run=ctx.dry_run):
                return succeeded(f"{name} already installed")
            pkg.rpm_install(url, dry_run=ctx.dry_run)
            return succeeded()

        ops.append(
            Operation(
                f"fonts.rpm.{name}",
                f"Installing {name}",
                install_rpm,
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("fonts",),
            )
        )

    archives = ctx.cfg.entries("archives", within=section)
    git_sets = section.get("git") or {}
    if not isinstance(git_sets, dict):
        raise ConfigurationError("fonts.git must map a directory name to repository URLs")
    subdirs = [str(a["name"]) for a in archives] + list(git_sets)

    def prepare_dirs() -> None:
        for sub in subdirs:
            ensure_dir(fonts_dir / sub, owner=ctx.facts.owner, dry_run=ctx.dry_run)
        chown_tree(fonts_dir, ctx.facts.owner, dry_run=ctx.dry_run)

    if subdirs:
        ops.append(
            Operation(
                "fonts.dirs",
                f"Preparing {fonts_dir}",
                prepare_dirs,
                failure_policy=FailurePolicy.ABORT,
                tags=("fonts",),
            )
        )

    for entry in archives:
        name, url = str(entry["name"]), str(entry["url"])
        script = _ARCHIVE_SCRIPT.format(url=shlex.quote(url), dest=shlex.quote(str(fonts_dir / name)))
        ops.append(
            Operation(
                f"fonts.archive.{name}",
                f"Installing {name} fonts",
                lambda script=script: run_as_user(user, script, dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("fonts",),
            )
        )

    for name, urls in git_sets.items():
        dest_root = fonts_dir / name

        def clone(url: str, dest_root=dest_root) -> None:
            dest = dest_root / _repo_dirname(url)
            if dest.exists():
                return
            run_as_user(
                user,
                f"git clone --depth 1 {shlex.quote(url)} {shlex.quote(str(dest))}",
                dry_run=ctx.dry_run,
            )

        ops.append(
            batch_operation(
                f"fonts.git.{name}",
                f"Installing {name}",
                [str(u) for u in urls or []],
                mode=BatchMode.PER_ITEM,
                apply_one=clone,
                failure_policy=FailurePolicy.WARN,
                tags=("fonts",),
            )
        )

    if subdirs:
        ops.append(
            Operation(
                "fonts.cache",
                "Rebuilding font cache",
                lambda: run_as_user(user, "fc-cache -f", dry_run=ctx.dry_run),
                failure_policy=FailurePolicy.INTERACTIVE,
                tags=("fonts",),
            )
        )
    return ops
