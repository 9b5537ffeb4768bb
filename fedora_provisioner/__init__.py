"""Fedora workstation provisioner (declarative, idempotent).

Core design goals:
- Immutable host facts captured once per session
- Ordered, declarative operations
- Per-operation failure policy (abort / warn / interactive)
- Idempotent actions so a rerun is the resume story
- Centralized logging
"""

__all__ = []
