"""Tests for the filesystem collaborators.

Tests verify:
1. append-if-absent is idempotent
2. at most one backup per path, never overwritten
3. write_file only rewrites changed content
4. copy_tree copies contents (cp -rT) and can replace
"""

import os
import stat
from unittest.mock import patch

import pytest

from fedora_provisioner.lib.assets import copy_tree
from fedora_provisioner.lib.files import (
    append_line_if_absent,
    backup_file,
    ensure_dir,
    write_file,
)
from fedora_provisioner.lib.repos import render_repo, write_repo_file


class TestAppendLineIfAbsent:
    """Idempotent config patching."""

    def test_twice_equals_once(self, tmp_path):
        conf = tmp_path / 'dnf.conf'
        conf.write_text('[main]\ngpgcheck=True\n')

        assert append_line_if_absent(conf, 'max_parallel_downloads=10') is True
        once = conf.read_text()
        assert append_line_if_absent(conf, 'max_parallel_downloads=10') is False
        assert conf.read_text() == once
        assert once.count('max_parallel_downloads=10') == 1

    def test_prefix_match_keeps_operator_value(self, tmp_path):
        """An existing key= line wins over the default value."""
        conf = tmp_path / 'dnf.conf'
        conf.write_text('[main]\nmax_parallel_downloads=5\n')
        changed = append_line_if_absent(conf, 'max_parallel_downloads=10', match_prefix='max_parallel_downloads=')
        assert changed is False
        assert 'max_parallel_downloads=10' not in conf.read_text()

    def test_missing_trailing_newline(self, tmp_path):
        conf = tmp_path / 'dnf.conf'
        conf.write_text('[main]')
        append_line_if_absent(conf, 'a=1')
        assert conf.read_text() == '[main]\na=1\n'

    def test_creates_file(self, tmp_path):
        conf = tmp_path / 'sub' / 'new.conf'
        append_line_if_absent(conf, 'a=1')
        assert conf.read_text() == 'a=1\n'

    def test_dry_run_does_not_write(self, tmp_path):
        conf = tmp_path / 'dnf.conf'
        conf.write_text('[main]\n')
        assert append_line_if_absent(conf, 'a=1', dry_run=True) is True
        assert conf.read_text() == '[main]\n'


class TestBackupFile:
    """backup-before-overwrite invariant."""

    def test_single_backup_never_overwritten(self, tmp_path):
        conf = tmp_path / 'dnf.conf'
        conf.write_text('original\n')

        first = backup_file(conf)
        assert first == tmp_path / 'dnf.conf.bak'

        conf.write_text('modified\n')
        second = backup_file(conf)

        assert second is None
        assert (tmp_path / 'dnf.conf.bak').read_text() == 'original\n'
        assert sorted(p.name for p in tmp_path.iterdir()) == ['dnf.conf', 'dnf.conf.bak']

    def test_missing_source(self, tmp_path):
        assert backup_file(tmp_path / 'absent.conf') is None
        assert not (tmp_path / 'absent.conf.bak').exists()


class TestWriteFile:

    def test_unchanged_content_not_rewritten(self, tmp_path):
        p = tmp_path / 'x.conf'
        assert write_file(p, 'a\n') is True
        assert write_file(p, 'a\n') is False
        assert write_file(p, 'b\n') is True
        assert p.read_text() == 'b\n'

    def test_mode(self, tmp_path):
        p = tmp_path / 'x.conf'
        write_file(p, 'a\n', mode=0o600)
        assert stat.S_IMODE(p.stat().st_mode) == 0o600


class TestEnsureDir:

    def test_mode_and_owner(self, tmp_path):
        owner = (os.getuid(), os.getgid())
        d = ensure_dir(tmp_path / 'a' / 'b', mode=0o750, owner=owner)
        assert d.is_dir()
        assert stat.S_IMODE(d.stat().st_mode) == 0o750
        assert (d.stat().st_uid, d.stat().st_gid) == owner

    def test_idempotent(self, tmp_path):
        ensure_dir(tmp_path / 'a')
        ensure_dir(tmp_path / 'a')
        assert (tmp_path / 'a').is_dir()


class TestCopyTree:

    def test_copies_contents(self, tmp_path):
        src = tmp_path / 'src'
        (src / 'nested').mkdir(parents=True)
        (src / 'top.colors').write_text('1')
        (src / 'nested' / 'deep.svg').write_text('2')
        dst = tmp_path / 'dst'

        copy_tree(src, dst)

        assert (dst / 'top.colors').read_text() == '1'
        assert (dst / 'nested' / 'deep.svg').read_text() == '2'

    def test_replace_removes_stale_files(self, tmp_path):
        src = tmp_path / 'src'
        src.mkdir()
        (src / 'new').write_text('n')
        dst = tmp_path / 'dst'
        dst.mkdir()
        (dst / 'stale').write_text('s')

        copy_tree(src, dst, replace=True)

        assert sorted(p.name for p in dst.iterdir()) == ['new']

    def test_owner_applies_to_created_parents(self, tmp_path):
        """Parents created for the destination get the owner; existing ones are left alone."""
        src = tmp_path / 'src'
        src.mkdir()
        (src / 'a.svg').write_text('x')
        dst = tmp_path / 'home' / '.local' / 'share' / 'icons' / 'Theme-folders'
        owners = {}

        def record(path, uid, gid, **kwargs):
            owners[str(path)] = (uid, gid)

        with patch('fedora_provisioner.lib.files.os.chown', side_effect=record):
            copy_tree(src, dst, owner=(1000, 1000))

        assert owners[str(tmp_path / 'home')] == (1000, 1000)
        assert owners[str(dst.parent)] == (1000, 1000)
        assert owners[str(dst / 'a.svg')] == (1000, 1000)
        assert str(tmp_path) not in owners

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            copy_tree(tmp_path / 'nope', tmp_path / 'dst')


class TestRepoFiles:

    def test_render(self):
        text = render_repo('terra', {'name': 'Terra', 'enabled': 1, 'gpgcheck': False})
        assert text == '[terra]\nname=Terra\nenabled=1\ngpgcheck=0\n'

    def test_write_is_idempotent(self, tmp_path):
        opts = {'name': 'Visual Studio Code', 'enabled': 1}
        assert write_repo_file('vscode', 'code', opts, repos_dir=str(tmp_path)) is True
        assert write_repo_file('vscode', 'code', opts, repos_dir=str(tmp_path)) is False
        assert (tmp_path / 'vscode.repo').read_text().startswith('[code]\n')
