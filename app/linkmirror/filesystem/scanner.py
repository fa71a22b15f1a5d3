"""Subtree scanner for excluded content.

Answers whether a source subtree contains anything an exclude rule
matches. A subtree without matches is linked as a whole; one with a
match has to be materialized.

Enumeration errors are swallowed: an unreadable branch is skipped, and
a subtree whose readable part holds no match is reported clean. Linking
such a subtree is preferred over blocking the run.
"""

import logging
import os
from pathlib import Path

from linkmirror.core.patterns import RuleSet
from linkmirror.filesystem.operator import is_reparse_point

logger = logging.getLogger(__name__)


class SubtreeScanner:
    """Searches subtrees for entries matching exclude rules.

    Args:
        rules: Exclude rules to match descendants against.
    """

    def __init__(self, rules: RuleSet) -> None:
        self._rules = rules

    def is_excluded(self, root: Path) -> bool:
        """Check if any descendant of ``root`` matches an exclude rule."""
        return self.find_first_match(root) is not None

    def find_first_match(self, root: Path) -> Path | None:
        """Find the first descendant of ``root`` matching an exclude rule.

        Directory names are matched against folder-name rules, file names
        against file patterns. ``root`` itself is not matched. Reparse
        points are never descended.

        Args:
            root: Directory whose descendants are scanned.

        Returns:
            Path of the first matching descendant, or None if the subtree
            is clean.
        """
        if self._rules.is_empty:
            return None

        for dirpath, dirnames, filenames in os.walk(root, onerror=_skip_unreadable):
            current = Path(dirpath)

            for name in sorted(dirnames):
                if self._rules.matches_folder(name):
                    return current / name

            for name in sorted(filenames):
                if self._rules.matches_file(name):
                    return current / name

            dirnames[:] = sorted(d for d in dirnames if not is_reparse_point(current / d))

        return None


def is_subtree_excluded(root: Path, rules: RuleSet) -> bool:
    """Check if a subtree contains any entry matching an exclude rule.

    Args:
        root: Source directory to scan.
        rules: Exclude rules.

    Returns:
        True if the subtree is mixed, False if it is clean.
    """
    return SubtreeScanner(rules).is_excluded(root)


def _skip_unreadable(error: OSError) -> None:
    logger.debug("Skipping unreadable branch %s: %s", error.filename, error)
