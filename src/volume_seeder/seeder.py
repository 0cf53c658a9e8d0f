"""
First-run seeding of managed directories from their default snapshots.

Each managed directory is evaluated independently: if its emptiness test says
it is unseeded, the snapshot is merged into the live path without touching
anything already there. A missing or unreadable snapshot falls back to creating
the minimal structure the emptiness test looks for. Any other filesystem error
is fatal and stops the run before the downstream service is started.

Seeding is not atomic across processes. Two containers starting against the
same empty volume at once can both decide to seed; the no-clobber copy keeps
identical content consistent but a partial failure in one of them is not
guarded against.
"""
import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from volume_seeder.directories import ManagedDirectory, SeedDecision
from volume_seeder.errors import SeedError, SeedErrorKind

logger = logging.getLogger(__name__)


class SeedOutcome(str, Enum):
    SEEDED = "seeded"        # Snapshot merged into the live path
    FALLBACK = "fallback"    # Snapshot unavailable, minimal structure created
    SKIPPED = "skipped"      # Already seeded, nothing written
    PLANNED = "planned"      # Dry run, would seed


@dataclass
class DirectoryResult:
    name: str
    decision: SeedDecision
    outcome: SeedOutcome
    entries_created: int = 0
    error_kind: Optional[SeedErrorKind] = None  # recoverable error behind a fallback


@dataclass
class SeedReport:
    """Per-directory results of a seeding run, in evaluation order."""
    results: List[DirectoryResult] = field(default_factory=list)

    def count(self, outcome: SeedOutcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    def get(self, name: str) -> DirectoryResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)

    def summary(self) -> str:
        parts = [f"{self.count(outcome)} {outcome.value}" for outcome in SeedOutcome if self.count(outcome)]
        return ", ".join(parts) if parts else "no managed directories"


def snapshot_available(snapshot: Path) -> bool:
    """True if the snapshot exists, is a directory and can be listed."""
    try:
        with os.scandir(snapshot) as entries:
            next(entries, None)
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return False
    return True


def merge_tree(source: Path, target: Path) -> int:
    """Copy everything under source into target, never replacing existing entries.

    Directories that already exist are merged into; files, symlinks and
    directories that exist in target under the same name are left untouched.
    Symlinks are recreated as symlinks. Returns the number of entries created.
    """
    created = 0
    if not os.path.lexists(target):
        target.mkdir(parents=True)
        created += 1

    with os.scandir(source) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        dest = target / entry.name
        src = Path(entry.path)

        if os.path.lexists(dest):
            if entry.is_dir(follow_symlinks=False) and dest.is_dir() and not dest.is_symlink():
                created += merge_tree(src, dest)
            else:
                logger.debug(f"Keeping existing {dest}")
            continue

        if entry.is_symlink():
            os.symlink(os.readlink(src), dest)
            created += 1
        elif entry.is_dir():
            created += merge_tree(src, dest)
            shutil.copystat(src, dest)
        else:
            shutil.copy2(src, dest)
            created += 1

    return created


def seed_directory(directory: ManagedDirectory, dry_run: bool = False) -> DirectoryResult:
    """Evaluate one managed directory and seed it if needed.

    Raises:
        SeedError: for any filesystem failure other than a missing snapshot
    """
    try:
        decision = directory.decide()
    except OSError as e:
        raise SeedError.from_os_error(directory.name, e) from e

    if decision is SeedDecision.SKIP:
        logger.info(f"{directory.name}: already seeded ({directory.emptiness_test}), skipping {directory.live_path}")
        return DirectoryResult(directory.name, decision, SeedOutcome.SKIPPED)

    if dry_run:
        logger.info(f"{directory.name}: would seed {directory.live_path} from {directory.default_snapshot_path}")
        return DirectoryResult(directory.name, decision, SeedOutcome.PLANNED)

    try:
        if snapshot_available(directory.default_snapshot_path):
            created = merge_tree(directory.default_snapshot_path, directory.live_path)
            # The snapshot may lack the checked subpath; without it the next start re-seeds
            if not os.path.lexists(directory.fallback_path):
                directory.fallback_path.mkdir(parents=True)
                created += 1
            logger.info(f"{directory.name}: seeded {directory.live_path} from "
                        f"{directory.default_snapshot_path} ({created} entries)")
            return DirectoryResult(directory.name, decision, SeedOutcome.SEEDED, created)

        logger.warning(f"{directory.name}: default snapshot {directory.default_snapshot_path} "
                       f"is missing or unreadable, creating empty {directory.fallback_path}")
        existed = os.path.lexists(directory.fallback_path)
        directory.fallback_path.mkdir(parents=True, exist_ok=True)
        return DirectoryResult(directory.name, decision, SeedOutcome.FALLBACK, 0 if existed else 1,
                               SeedErrorKind.SOURCE_MISSING)
    except OSError as e:
        raise SeedError.from_os_error(directory.name, e) from e


def run_seeder(directories: Iterable[ManagedDirectory], dry_run: bool = False) -> SeedReport:
    """Seed every managed directory that needs it.

    Stops at the first fatal error; the caller must not hand off in that case.

    Args:
        directories: Managed directories to evaluate, in order
        dry_run: Only evaluate and log decisions, write nothing

    Returns:
        SeedReport describing what happened to each directory

    Raises:
        SeedError: naming the directory that failed and the underlying cause
    """
    report = SeedReport()
    for directory in directories:
        report.results.append(seed_directory(directory, dry_run=dry_run))
    logger.info(f"Seeding {'plan' if dry_run else 'complete'}: {report.summary()}")
    return report
