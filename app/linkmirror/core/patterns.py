"""Exclude and protect pattern rules.

Raw pattern lines are classified into two kinds of rules: folder names
(exact directory-name matches) and file patterns (case-insensitive globs
matched against file names). The same classification is used for the
exclude family (what forces a subtree to be materialized instead of
linked) and the protect family (what the pruner must never delete).
"""

import fnmatch
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

WILDCARD_CHARS: tuple[str, ...] = ("*", "?")
COMMENT_PREFIX = "#"

# Built-in exclude rules used when no exclude file is present.
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    # Version control
    ".git",
    ".svn",
    ".hg",
    # Dependencies and virtual environments
    "node_modules",
    ".venv",
    "__pycache__",
    # Build output
    "bin",
    "obj",
    "build",
    "dist",
    ".vs",
    # Transient files
    "*.tmp",
    "*.temp",
    "*.log",
    "*.pyc",
    "*.swp",
    "~$*",
)


class PatternKind(str, Enum):
    """Kind of a classified pattern rule.

    Attributes:
        FOLDER_NAME: Exact directory name.
        FILE_PATTERN: Glob matched against file names.
    """

    FOLDER_NAME = "folder"
    FILE_PATTERN = "file"


def classify_pattern(pattern: str) -> PatternKind:
    """Classify a single trimmed pattern line.

    Rules are applied in order: any wildcard makes a file pattern; a
    leading dot makes a folder name (``.git``); any other dot makes a
    file pattern (``Thumbs.db``); everything else is a folder name.

    Args:
        pattern: Trimmed, non-empty pattern text.

    Returns:
        The PatternKind of the pattern.
    """
    if any(char in pattern for char in WILDCARD_CHARS):
        return PatternKind.FILE_PATTERN
    if pattern.startswith("."):
        return PatternKind.FOLDER_NAME
    if "." in pattern:
        return PatternKind.FILE_PATTERN
    return PatternKind.FOLDER_NAME


def parse_pattern_lines(text: str) -> list[str]:
    """Split pattern file content into pattern lines.

    Lines are trimmed; blank lines and lines starting with ``#`` are
    dropped. Order is preserved.

    Args:
        text: Raw pattern file content.

    Returns:
        List of pattern strings.
    """
    patterns: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        patterns.append(line)
    return patterns


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Immutable set of folder-name and file-pattern rules.

    Folder names match directory names exactly, with the case
    sensitivity of the host filesystem. File patterns are globs matched
    case-insensitively against file names.

    Attributes:
        folder_names: Exact directory names.
        file_patterns: Glob patterns, in declaration order.
    """

    folder_names: frozenset[str] = frozenset()
    file_patterns: tuple[str, ...] = ()
    _folder_keys: frozenset[str] = field(init=False, repr=False, compare=False)
    _file_keys: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_folder_keys", frozenset(os.path.normcase(n) for n in self.folder_names)
        )
        object.__setattr__(self, "_file_keys", tuple(p.casefold() for p in self.file_patterns))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "RuleSet":
        """Build a RuleSet by classifying pattern lines.

        Args:
            lines: Trimmed, non-empty, non-comment pattern lines.

        Returns:
            RuleSet holding the classified rules.
        """
        folders: set[str] = set()
        files: list[str] = []
        for line in lines:
            if classify_pattern(line) is PatternKind.FOLDER_NAME:
                folders.add(line)
            elif line not in files:
                files.append(line)
        return cls(folder_names=frozenset(folders), file_patterns=tuple(files))

    @property
    def is_empty(self) -> bool:
        """Check if the rule set contains no rules."""
        return not self.folder_names and not self.file_patterns

    def matches_folder(self, name: str) -> bool:
        """Check if a directory name matches a folder-name rule."""
        return os.path.normcase(name) in self._folder_keys

    def matches_file(self, name: str) -> bool:
        """Check if a file name matches any file-pattern rule."""
        key = name.casefold()
        return any(fnmatch.fnmatchcase(key, pattern) for pattern in self._file_keys)

    def matches(self, name: str, *, is_dir: bool) -> bool:
        """Match an entry name against the rule kind that applies to it.

        Args:
            name: Entry name (basename).
            is_dir: True to match folder-name rules, False for file patterns.

        Returns:
            True if the entry matches.
        """
        return self.matches_folder(name) if is_dir else self.matches_file(name)


@dataclass(frozen=True, slots=True)
class PatternSet:
    """Exclude and protect rule families for one run.

    Attributes:
        exclude: Rules whose matches force materialization and are never copied.
        protect: Rules whose matches are never deleted by the pruner.
    """

    exclude: RuleSet = field(default_factory=RuleSet)
    protect: RuleSet = field(default_factory=RuleSet)

    @classmethod
    def from_lines(cls, exclude: Iterable[str], protect: Iterable[str] = ()) -> "PatternSet":
        """Build a PatternSet from exclude and protect pattern lines."""
        return cls(exclude=RuleSet.from_lines(exclude), protect=RuleSet.from_lines(protect))


def load_rule_file(path: Path | None, default: Iterable[str] = ()) -> RuleSet:
    """Load a pattern file into a RuleSet.

    A missing file (or no path at all) is not an error: the default
    patterns are classified instead.

    Args:
        path: Pattern file path, or None.
        default: Pattern lines used when the file is absent or unreadable.

    Returns:
        RuleSet built from the file or from the defaults.
    """
    if path is None:
        return RuleSet.from_lines(default)

    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        logger.debug("Pattern file not found, using defaults: %s", path)
        return RuleSet.from_lines(default)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read pattern file %s, using defaults: %s", path, e)
        return RuleSet.from_lines(default)

    return RuleSet.from_lines(parse_pattern_lines(text))


def load_pattern_set(exclude_file: Path | None, protect_file: Path | None) -> PatternSet:
    """Load the exclude and protect pattern files of a run.

    Args:
        exclude_file: Exclude pattern file; missing falls back to
            DEFAULT_EXCLUDE_PATTERNS.
        protect_file: Protect pattern file; missing yields no protect rules.

    Returns:
        PatternSet for the run.
    """
    return PatternSet(
        exclude=load_rule_file(exclude_file, DEFAULT_EXCLUDE_PATTERNS),
        protect=load_rule_file(protect_file),
    )
