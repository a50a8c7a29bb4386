"""
Services Package.

Orchestration on top of the repositories:

    AggregateMaintainer    farm rollups recomputed after every mutation
    DatasetIngestService   upload -> detect -> normalize -> register
    Notifier               outbound notification seam (LoggingNotifier default)

Services are wired by infrastructure.factory.RepositoryFactory.
"""

from .aggregate_service import AggregateMaintainer
from .notification_service import Notifier, LoggingNotifier, notify_users, farm_recipients
from .dataset_ingest_service import DatasetIngestService

__all__ = [
    'AggregateMaintainer',
    'DatasetIngestService',
    'Notifier',
    'LoggingNotifier',
    'notify_users',
    'farm_recipients',
]
