# treecopy/core/conflict_resolver.py

import logging
import os
from pathlib import Path

from .interfaces.types import ConflictAction, ConflictPolicy

logger = logging.getLogger(__name__)

_ACTIONS = {
    ConflictPolicy.ABORT: ConflictAction.ABORT,
    ConflictPolicy.SKIP: ConflictAction.SKIP,
    ConflictPolicy.OVERWRITE: ConflictAction.PROCEED,
}


def resolve(destination_path: Path, policy: ConflictPolicy) -> ConflictAction:
    """
    Decide what to do with one destination entry right before it is written.

    A missing destination always proceeds. An existing one (including a
    dangling symlink) is handled according to ``policy``.
    """
    if not os.path.lexists(destination_path):
        return ConflictAction.PROCEED
    return _ACTIONS[ConflictPolicy(policy)]


class ConflictResolver:
    """Applies one ConflictPolicy uniformly for the duration of an operation."""

    def __init__(self, policy: ConflictPolicy):
        self.policy = ConflictPolicy(policy)
        self.conflicts_seen = 0

    def resolve(self, destination_path: Path) -> ConflictAction:
        if not os.path.lexists(destination_path):
            return ConflictAction.PROCEED
        self.conflicts_seen += 1
        action = _ACTIONS[self.policy]
        logger.debug(f"Destination exists: {destination_path} -> {action.name}")
        return action
