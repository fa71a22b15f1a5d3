"""Run and batch configuration.

A MirrorConfig describes one run (one source root mirrored into one
destination root). A BatchConfig, stored as TOML, lists several
independent root pairs that are mirrored concurrently.

Batch configuration is stored in ~/.config/linkmirror/pairs.toml
"""

import os
import tomllib
from pathlib import Path
from typing import Annotated, Self

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from linkmirror.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from linkmirror.core.paths import get_batch_config_path

DEFAULT_MAX_SIZE_MB = 5.0
BYTES_PER_MB = 1024 * 1024


def _normalize(path: Path) -> Path:
    return Path(os.path.normcase(os.path.abspath(path.expanduser())))


def roots_overlap(first: Path, second: Path) -> bool:
    """Check if two roots are the same directory or nested in each other.

    Comparison is lexical (absolute, case-normalized paths); links are
    not resolved.

    Args:
        first: First root.
        second: Second root.

    Returns:
        True if the roots overlap.
    """
    a, b = _normalize(first), _normalize(second)
    return a == b or a in b.parents or b in a.parents


def _expand_optional(path: Path | None) -> Path | None:
    return path.expanduser() if path is not None else None


class MirrorConfig(BaseModel):
    """Configuration of a single mirror run.

    Attributes:
        source_root: Directory tree to mirror.
        dest_root: Destination directory (created when missing).
        exclude_file: Exclude pattern file (None or missing = built-in defaults).
        protect_file: Protect pattern file (None or missing = no protect rules).
        max_size_mb: Largest file size copied into materialized directories.
        dry_run: Simulate every mutation.
        prune: Run the orphan pruner after reconciliation.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    source_root: Path
    dest_root: Path
    exclude_file: Path | None = None
    protect_file: Path | None = None
    max_size_mb: Annotated[
        float,
        Field(gt=0, description="Maximum copied file size in MB"),
    ] = DEFAULT_MAX_SIZE_MB
    dry_run: bool = False
    prune: bool = True

    @field_validator("source_root", "dest_root")
    @classmethod
    def _expand_root(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("exclude_file", "protect_file")
    @classmethod
    def _expand_pattern_file(cls, v: Path | None) -> Path | None:
        return _expand_optional(v)

    @model_validator(mode="after")
    def _check_roots_disjoint(self) -> Self:
        if roots_overlap(self.source_root, self.dest_root):
            msg = f"Source and destination overlap: {self.source_root} / {self.dest_root}"
            raise ValueError(msg)
        return self

    @property
    def max_copy_bytes(self) -> int:
        """Copy size threshold in bytes."""
        return int(self.max_size_mb * BYTES_PER_MB)


class BatchDefaults(BaseModel):
    """Settings shared by every pair of a batch.

    Attributes:
        exclude_file: Default exclude pattern file.
        protect_file: Default protect pattern file.
        max_size_mb: Default copy size threshold in MB.
    """

    model_config = ConfigDict(extra="forbid")

    exclude_file: Path | None = None
    protect_file: Path | None = None
    max_size_mb: Annotated[float, Field(gt=0)] = DEFAULT_MAX_SIZE_MB

    @field_validator("exclude_file", "protect_file")
    @classmethod
    def _expand_pattern_file(cls, v: Path | None) -> Path | None:
        return _expand_optional(v)


class PairConfig(BaseModel):
    """One source/destination root pair of a batch.

    Unset optional fields fall back to the batch defaults.
    """

    model_config = ConfigDict(extra="forbid")

    source: Path
    dest: Path
    name: str | None = None
    exclude_file: Path | None = None
    protect_file: Path | None = None
    max_size_mb: Annotated[float, Field(gt=0)] | None = None

    @field_validator("source", "dest")
    @classmethod
    def _expand_root(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("exclude_file", "protect_file")
    @classmethod
    def _expand_pattern_file(cls, v: Path | None) -> Path | None:
        return _expand_optional(v)

    @model_validator(mode="after")
    def _check_roots_disjoint(self) -> Self:
        if roots_overlap(self.source, self.dest):
            msg = f"Source and destination overlap: {self.source} / {self.dest}"
            raise ValueError(msg)
        return self

    @property
    def label(self) -> str:
        """Display name of the pair."""
        return self.name or self.source.name or str(self.source)


class BatchConfig(BaseModel):
    """Independent root pairs mirrored in one batch.

    Roots of different pairs must not overlap: concurrent runs share no
    locking and rely on touching disjoint trees.
    """

    model_config = ConfigDict(extra="forbid")

    defaults: BatchDefaults = Field(default_factory=BatchDefaults)
    pairs: Annotated[list[PairConfig], Field(min_length=1)]

    @model_validator(mode="after")
    def _check_pairs_disjoint(self) -> Self:
        for i, first in enumerate(self.pairs):
            for second in self.pairs[i + 1 :]:
                for a in (first.source, first.dest):
                    for b in (second.source, second.dest):
                        if roots_overlap(a, b):
                            msg = f"Pairs '{first.label}' and '{second.label}' overlap: {a} / {b}"
                            raise ValueError(msg)
        return self

    def to_mirror_configs(self, *, dry_run: bool = False, prune: bool = True) -> list[MirrorConfig]:
        """Resolve every pair against the defaults.

        Args:
            dry_run: Dry-run switch applied to every run.
            prune: Pruning switch applied to every run.

        Returns:
            One MirrorConfig per pair, in declaration order.
        """
        d = self.defaults
        return [
            MirrorConfig(
                source_root=pair.source,
                dest_root=pair.dest,
                exclude_file=pair.exclude_file or d.exclude_file,
                protect_file=pair.protect_file or d.protect_file,
                max_size_mb=pair.max_size_mb or d.max_size_mb,
                dry_run=dry_run,
                prune=prune,
            )
            for pair in self.pairs
        ]


def load_batch_config(path: Path | None = None) -> BatchConfig:
    """Load a batch configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default pairs.toml.

    Returns:
        Validated BatchConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_batch_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Batch config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read batch config: {e}") from e

    try:
        return BatchConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid batch config content: {e}") from e


def save_batch_config(config: BatchConfig, path: Path | None = None) -> Path:
    """Save a batch configuration to a TOML file.

    Args:
        config: BatchConfig to save.
        path: Path to save to. If None, uses the default pairs.toml.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_batch_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "wb") as f:
            tomli_w.dump(config.model_dump(mode="json", exclude_none=True), f)
    except OSError as e:
        raise ConfigError(f"Failed to write batch config: {e}") from e

    return config_path


def build_mirror_config(**values: object) -> MirrorConfig:
    """Validate run settings into a MirrorConfig.

    Raises:
        ConfigError: If the settings are invalid (e.g. overlapping roots).
    """
    try:
        return MirrorConfig.model_validate(values)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid run configuration: {e}") from e
