"""Release pipeline: version bump, builds, bundle assembly, deploy, archive."""

from avgrel.services.release.pipeline import ReleaseOutcome, ReleasePipeline

__all__ = ["ReleaseOutcome", "ReleasePipeline"]
