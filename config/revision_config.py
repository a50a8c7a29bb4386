"""
Revision Log Configuration.

Exports:
    RevisionConfig: Per-entity revision caps
"""

import os
from pydantic import BaseModel, Field

from .defaults import RevisionDefaults


class RevisionConfig(BaseModel):
    """Revision log caps. Entries beyond the cap are dropped oldest-first."""

    block_revision_cap: int = Field(
        default=RevisionDefaults.BLOCK_REVISION_CAP,
        ge=1,
        description="Maximum revisions kept per block"
    )

    dataset_revision_cap: int = Field(
        default=RevisionDefaults.DATASET_REVISION_CAP,
        ge=1,
        description="Maximum revisions kept per dataset"
    )

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            block_revision_cap=int(os.environ.get("BLOCK_REVISION_CAP", str(RevisionDefaults.BLOCK_REVISION_CAP))),
            dataset_revision_cap=int(os.environ.get("DATASET_REVISION_CAP", str(RevisionDefaults.DATASET_REVISION_CAP))),
        )
