"""
Managed directories and the seeding decision.

A managed directory is a mount point whose initial contents are bootstrapped
from a default snapshot baked into the image. Whether it needs seeding is
derived from what is on disk at start time, never from a marker file.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Optional


class EmptinessTestKind(str, Enum):
    """Ways of deciding that a managed directory is unseeded."""
    IS_EMPTY = "is_empty"          # Live path missing or has no entries
    PATH_MISSING = "path_missing"  # A specific subpath of the live path is missing


class SeedDecision(str, Enum):
    SEED = "seed"
    SKIP = "skip"


@dataclass(frozen=True)
class EmptinessTest:
    """Test applied to a live path to decide whether it must be seeded."""
    kind: EmptinessTestKind = EmptinessTestKind.IS_EMPTY
    subpath: Optional[str] = None

    def __post_init__(self):
        if self.kind is EmptinessTestKind.PATH_MISSING:
            if not self.subpath:
                raise ValueError("path_missing test requires a subpath")
            validate_subpath(self.subpath)
        elif self.subpath is not None:
            raise ValueError("is_empty test does not take a subpath")

    @classmethod
    def is_empty(cls) -> "EmptinessTest":
        return cls(EmptinessTestKind.IS_EMPTY)

    @classmethod
    def path_missing(cls, subpath: str) -> "EmptinessTest":
        return cls(EmptinessTestKind.PATH_MISSING, subpath)

    def target(self, live_path: Path) -> Path:
        """The path this test inspects, which is also the minimal structure created on fallback."""
        if self.kind is EmptinessTestKind.PATH_MISSING:
            return live_path / self.subpath
        return live_path

    def is_unseeded(self, live_path: Path) -> bool:
        """Evaluate the test. OSErrors from listing the live path propagate."""
        target = self.target(live_path)
        if self.kind is EmptinessTestKind.PATH_MISSING:
            # lexists: a dangling symlink still counts as present
            return not os.path.lexists(target)

        if not os.path.lexists(target):
            return True
        with os.scandir(target) as entries:
            return next(entries, None) is None

    def __str__(self) -> str:
        if self.kind is EmptinessTestKind.PATH_MISSING:
            return f"path_missing({self.subpath})"
        return "is_empty"


def validate_subpath(subpath: str) -> str:
    """Reject subpaths that are absolute or escape the live path."""
    parts = PurePosixPath(subpath).parts
    if PurePosixPath(subpath).is_absolute() or not parts:
        raise ValueError(f"Subpath must be a non-empty relative path: {subpath!r}")
    if ".." in parts:
        raise ValueError(f"Subpath must not contain '..': {subpath!r}")
    return subpath


@dataclass(frozen=True)
class ManagedDirectory:
    """A live mount point paired with its read-only default snapshot."""
    name: str
    live_path: Path
    default_snapshot_path: Path
    emptiness_test: EmptinessTest = field(default_factory=EmptinessTest.is_empty)

    def decide(self) -> SeedDecision:
        if self.emptiness_test.is_unseeded(self.live_path):
            return SeedDecision.SEED
        return SeedDecision.SKIP

    @property
    def fallback_path(self) -> Path:
        return self.emptiness_test.target(self.live_path)
