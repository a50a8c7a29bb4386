# ============================================================================
# AGGREGATE MAINTAINER
# ============================================================================
# STATUS: Service - farm-level rollups
# PURPOSE: Recompute blockCount, datasetCount and totalArea from live collections
# EXPORTS: AggregateMaintainer
# DEPENDENCIES: core.logic.calculations, infrastructure repositories
# ============================================================================
"""
Aggregate Maintainer.

After every block or dataset mutation the owning farm's rollups are
recomputed from scratch:

    blockCount   = number of features in farms/{farmId}/blocks.json
    totalArea    = sum of their `area` properties (square meters)
    datasetCount = number of farms/{farmId}/datasets/*/metadata.json documents

The recompute is a separate write after the entity write, with no
transaction between them. If it fails the rollup stays stale until the
next successful mutation recomputes it; the values are never maintained
incrementally, so they cannot drift.
"""

from typing import Optional

import pydantic

from exceptions import BusinessLogicError
from util_logger import LoggerFactory, ComponentType, LogContext
from core.models import Farm, utc_now
from core.logic.calculations import total_block_area
from infrastructure import paths
from infrastructure.document_store import DocumentStore
from infrastructure.farm_repository import FarmRepository
from infrastructure.block_repository import read_block_collection

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "AggregateMaintainer")


class AggregateMaintainer:
    """Full-recompute farm rollups."""

    def __init__(self, store: DocumentStore, farms: FarmRepository):
        self.store = store
        self.farms = farms

    def count_datasets(self, farm_id: str) -> int:
        return sum(
            1 for key in self.store.list(paths.datasets_prefix(farm_id))
            if paths.is_dataset_metadata_key(farm_id, key)
        )

    def refresh(self, farm_id: str) -> Farm:
        """
        Recompute and persist the farm rollups.

        Raises:
            NotFoundError: farm metadata missing
            StorageError: store failure
        """
        farm = self.farms.load(farm_id)
        features = read_block_collection(self.store, farm_id)["features"]

        farm.block_count = len(features)
        farm.total_area = total_block_area(features)
        farm.dataset_count = self.count_datasets(farm_id)
        farm.updated_at = utc_now()

        self.farms.save(farm)
        logger.debug(
            f"Refreshed rollups for farm {farm_id}: {farm.block_count} blocks, "
            f"{farm.dataset_count} datasets, {farm.total_area:.1f} m2",
            extra={'custom_dimensions': LogContext(farm_id=farm_id).to_dict()}
        )
        return farm

    def refresh_after_mutation(self, farm_id: str) -> Optional[Farm]:
        """
        refresh() for use at the end of a mutation.

        Failures are logged and swallowed: the entity write already
        succeeded and the next mutation will heal the rollup.
        """
        try:
            return self.refresh(farm_id)
        except (BusinessLogicError, pydantic.ValidationError) as e:
            logger.error(
                f"Failed to refresh rollups for farm {farm_id}: {e}",
                extra={'custom_dimensions': LogContext(farm_id=farm_id).to_dict()}
            )
            return None
