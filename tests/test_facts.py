"""Tests for host fact probing.

Tests verify:
1. ISA level parsing from the dynamic linker report
2. baseline selection prefers v3
3. effective user resolution order
4. probe refuses to run without root
"""

from dataclasses import FrozenInstanceError
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from fedora_provisioner import facts as facts_mod
from fedora_provisioner.errors import ConfigurationError, PrivilegeError
from fedora_provisioner.facts import (
    BASELINE_NONE,
    BASELINE_V2,
    BASELINE_V3,
    parse_isa_levels,
    probe,
    read_fedora_release,
    resolve_user,
    select_baseline,
)
from fedora_provisioner.lib.command import CmdResult

GLIBC_V3_HOST = """\
Subdirectories of glibc-hwcaps directories, in priority order:
  x86-64-v4
  x86-64-v3 (supported, searched)
  x86-64-v2 (supported, searched)
"""

GLIBC_V2_HOST = """\
Subdirectories of glibc-hwcaps directories, in priority order:
  x86-64-v4
  x86-64-v3
  x86-64-v2 (supported, searched)
"""


def cmd(stdout='', rc=0):
    return CmdResult(argv=[], returncode=rc, stdout=stdout, stderr='')


class TestIsaParsing:
    """parse_isa_levels / select_baseline."""

    def test_annotated_report_counts_only_supported(self):
        """Unsupported levels listed by glibc must not count."""
        assert parse_isa_levels(GLIBC_V2_HOST) == {'v2'}
        assert parse_isa_levels(GLIBC_V3_HOST) == {'v3', 'v2'}

    def test_bare_underscore_markers(self):
        """Reports without annotations are taken at face value."""
        assert parse_isa_levels('x86_64_v2\nx86_64_v3\n') == {'v2', 'v3'}

    def test_no_markers(self):
        assert parse_isa_levels('nothing relevant here') == set()

    @pytest.mark.parametrize('levels,expected', [
        ({'v2', 'v3'}, BASELINE_V3),
        ({'v3'}, BASELINE_V3),
        ({'v2'}, BASELINE_V2),
        ({'v4'}, BASELINE_NONE),
        (set(), BASELINE_NONE),
    ])
    def test_select_baseline(self, levels, expected):
        """Higher baseline wins when both are present."""
        assert select_baseline(levels) == expected

    def test_missing_linker_is_none(self, tmp_path):
        """A linker that cannot be executed means baseline unknown."""
        assert facts_mod.detect_cpu_baseline(str(tmp_path / 'ld.so')) == BASELINE_NONE

    def test_detect_runs_linker_help(self, tmp_path):
        """detect_cpu_baseline parses the linker's --help output."""
        linker = tmp_path / 'ld.so'
        linker.write_text('#!/bin/sh\n')
        linker.chmod(0o755)
        with patch('fedora_provisioner.facts.run_cmd', return_value=cmd(GLIBC_V2_HOST)) as mock_run:
            assert facts_mod.detect_cpu_baseline(str(linker)) == BASELINE_V2
        mock_run.assert_called_once_with([str(linker), '--help'], check=False)


class TestResolveUser:
    """Effective user resolution order."""

    def test_sudo_user_wins(self):
        with patch('fedora_provisioner.facts.run_cmd') as mock_run:
            assert resolve_user({'SUDO_USER': 'alice'}) == 'alice'
        mock_run.assert_not_called()

    def test_sudo_root_falls_through_to_logname(self):
        with patch('fedora_provisioner.facts.run_cmd', return_value=cmd('bob\n')):
            assert resolve_user({'SUDO_USER': 'root'}) == 'bob'

    def test_who_when_logname_fails(self):
        with patch('fedora_provisioner.facts.run_cmd') as mock_run:
            mock_run.side_effect = [
                cmd('', rc=1),                             # logname
                cmd('carol    tty2   2026-01-01 09:00\n'),  # who
            ]
            assert resolve_user({}) == 'carol'

    def test_root_as_last_resort(self):
        with patch('fedora_provisioner.facts.run_cmd', side_effect=[cmd('', rc=1), cmd('')]):
            assert resolve_user({}) == 'root'


class TestProbe:
    """probe() snapshot."""

    def test_requires_root(self):
        with patch('fedora_provisioner.facts.os.geteuid', return_value=1000):
            with pytest.raises(PrivilegeError):
                probe()

    def test_privilege_error_is_a_permission_error(self):
        assert issubclass(PrivilegeError, PermissionError)

    def test_snapshot(self, tmp_path):
        """Probe resolves the account record and collects facts."""
        os_release = tmp_path / 'os-release'
        os_release.write_text('NAME="Fedora Linux"\nVERSION_ID=42\n')
        pw = SimpleNamespace(pw_dir='/home/alice', pw_uid=1000, pw_gid=1001)

        with patch('fedora_provisioner.facts.os.geteuid', return_value=0), \
             patch('fedora_provisioner.facts.pwd.getpwnam', return_value=pw), \
             patch('fedora_provisioner.facts.detect_cpu_baseline', return_value=BASELINE_V3), \
             patch('fedora_provisioner.facts.shutil.which', side_effect=lambda b: '/usr/bin/' + b if b == 'flatpak' else None):
            result = probe(
                binaries=['flatpak', 'fwupdmgr'],
                env={'SUDO_USER': 'alice'},
                os_release=str(os_release),
            )

        assert result.user == 'alice'
        assert result.home == '/home/alice'
        assert result.owner == (1000, 1001)
        assert result.cpu_baseline == BASELINE_V3
        assert result.binaries == frozenset({'flatpak'})
        assert result.fedora_release == '42'
        assert result.is_root is True

    def test_facts_are_immutable(self, facts):
        with pytest.raises(FrozenInstanceError):
            facts.user = 'mallory'

    def test_unknown_account(self):
        with patch('fedora_provisioner.facts.os.geteuid', return_value=0), \
             patch('fedora_provisioner.facts.pwd.getpwnam', side_effect=KeyError('ghost')):
            with pytest.raises(ConfigurationError):
                probe(env={'SUDO_USER': 'ghost'})


class TestFedoraRelease:

    def test_quoted_version(self, tmp_path):
        p = tmp_path / 'os-release'
        p.write_text('VERSION_ID="41"\n')
        assert read_fedora_release(str(p)) == '41'

    def test_missing_file(self, tmp_path):
        assert read_fedora_release(str(tmp_path / 'nope')) == ''
