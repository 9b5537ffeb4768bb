"""Shared pytest fixtures for provisioner tests."""

import sys
from pathlib import Path

import pytest

# Allow running the suite from a checkout without installing.
sys.path.insert(0, str(Path(__file__).parent.parent))

from fedora_provisioner.config import ProvisionConfig, load_config
from fedora_provisioner.facts import HostFacts


@pytest.fixture
def facts(tmp_path):
    """Facts for a non-root user whose home lives under tmp_path."""
    home = tmp_path / 'home' / 'alice'
    home.mkdir(parents=True)
    return HostFacts(
        user='alice',
        home=str(home),
        is_root=True,
        cpu_baseline='v3',
        binaries=frozenset({'fwupdmgr', 'gsettings'}),
        uid=1000,
        gid=1000,
        fedora_release='42',
    )


@pytest.fixture
def empty_cfg():
    return ProvisionConfig(raw={})


@pytest.fixture
def default_cfg():
    return load_config()
