"""Volume Seeder - first-run seeding of persistent volumes for a GPU image-generation container."""

__version__ = "0.1.0"

from volume_seeder.directories import EmptinessTest, EmptinessTestKind, ManagedDirectory, SeedDecision
from volume_seeder.errors import HandoffError, SeedError, SeedErrorKind
from volume_seeder.seeder import SeedOutcome, SeedReport, run_seeder

__all__ = [
    "EmptinessTest",
    "EmptinessTestKind",
    "HandoffError",
    "ManagedDirectory",
    "SeedDecision",
    "SeedError",
    "SeedErrorKind",
    "SeedOutcome",
    "SeedReport",
    "run_seeder",
]
