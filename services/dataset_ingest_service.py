# ============================================================================
# DATASET INGEST SERVICE
# ============================================================================
# STATUS: Service - upload orchestration
# PURPOSE: Store, detect, normalize and register uploaded dataset files
# EXPORTS: DatasetIngestService
# DEPENDENCIES: ingestion, infrastructure.dataset_repository, services.notification_service
# ============================================================================
"""
Dataset Ingest Service.

Upload flow:

    1. size ceiling                    ValidationError, nothing written
    2. create dataset                  status=uploading
    3. store raw.{ext}, mark           status=processing
    4. detect format
         tiff   -> transcode_raster -> processed.jpg      type=raster
         vector -> normalize        -> processed.geojson  recordCount/bounds/fields
    5. mark                            status=completed

An ingestion failure in step 4 does not fail the request: the dataset is
kept with status=failed and the error message, so the user can see what
went wrong and re-upload.

Re-upload starts a new attempt on an existing dataset from a terminal
status. When the previous attempt had completed, the farm's other users
are told that the processed data changed.
"""

from typing import Any, Dict, Optional

from exceptions import ContractViolationError, ValidationError
from util_logger import LoggerFactory, ComponentType, LogContext, log_exceptions
from config import IngestConfig
from core.models import Dataset, DatasetStatus, DatasetType, FormatTag, Principal, utc_now
from ingestion import detect_format, normalize, transcode_raster
from infrastructure.dataset_repository import DatasetRepository
from infrastructure.farm_repository import FarmRepository
from .notification_service import Notifier, LoggingNotifier, farm_recipients, notify_users

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "DatasetIngestService")

FORMAT_DATASET_TYPES = {
    FormatTag.CSV: DatasetType.CSV,
    FormatTag.GEOJSON: DatasetType.GEOJSON,
    FormatTag.KML: DatasetType.KML,
    FormatTag.KMZ: DatasetType.KMZ,
    FormatTag.SHAPEFILE: DatasetType.SHAPEFILE,
    FormatTag.TIFF: DatasetType.RASTER,
}

# Cleared when a new attempt starts so stale results never outlive it
ATTEMPT_RESULT_FIELDS = (
    "record_count", "bounds", "fields", "geojson_path", "raster_path", "error", "processed_at",
)


class DatasetIngestService:
    """
    Upload orchestration on top of DatasetRepository.

    Args:
        datasets: Dataset repository
        farms: Farm repository (authorization, notification recipients)
        config: Ingestion limits and CSV options
        notifier: Notification backend (LoggingNotifier when omitted)
    """

    def __init__(
        self,
        datasets: DatasetRepository,
        farms: FarmRepository,
        config: Optional[IngestConfig] = None,
        notifier: Optional[Notifier] = None
    ):
        self.datasets = datasets
        self.farms = farms
        self.config = config or IngestConfig()
        self.notifier = notifier or LoggingNotifier()

    # =========================================================================
    # PUBLIC
    # =========================================================================

    @log_exceptions(logger=logger)
    def upload(
        self,
        farm_id: str,
        principal: Principal,
        filename: Optional[str],
        payload: bytes,
        name: Optional[str] = None,
        dataset_type: Optional[str] = None,
        content_type: Optional[str] = None,
        **metadata: Any
    ) -> Dataset:
        """
        Create a dataset from an uploaded file.

        Args:
            farm_id: Owning farm
            principal: Uploading user (needs write access)
            filename: Original filename (drives format detection)
            payload: File bytes
            name: Display name (defaults to the filename)
            dataset_type: Type tag used when the format is not detected
            content_type: MIME type of the raw upload
            **metadata: description, collected_at, collector_id, folder_id

        Returns:
            Dataset in status completed or failed

        Raises:
            ValidationError: empty or oversized payload, missing name
            NotFoundError / ForbiddenError: farm access
        """
        self._check_size(payload)
        tag = detect_format(payload, filename)

        dataset = self.datasets.create_dataset(farm_id, principal, {
            **metadata,
            "name": name or filename,
            "type": self._dataset_type(tag, dataset_type),
            "file_size": len(payload),
            "original_filename": filename,
        })
        return self._process(dataset, principal, filename, payload, tag, content_type)

    @log_exceptions(logger=logger)
    def reupload(
        self,
        farm_id: str,
        dataset_id: str,
        principal: Principal,
        filename: Optional[str],
        payload: bytes,
        content_type: Optional[str] = None,
        revision_message: Optional[str] = None
    ) -> Dataset:
        """
        Replace the file of an existing dataset and process it again.

        The pre-upload state is recorded as the newest revision.

        Raises:
            ValidationError: payload size, or dataset still uploading/processing
            NotFoundError / ForbiddenError: farm or dataset access
        """
        self._check_size(payload)
        farm, _access = self.farms.load_for_write(farm_id, principal)
        previous = self.datasets.load(farm_id, dataset_id)
        if previous.status not in (DatasetStatus.COMPLETED, DatasetStatus.FAILED):
            raise ValidationError(
                f"Dataset upload already in progress (status {previous.status.value})",
                details={'dataset_id': dataset_id}
            )

        self.datasets.snapshot(previous, principal, message=revision_message or f"Re-uploaded {filename or 'file'}")

        tag = detect_format(payload, filename)
        attempt = {
            "type": self._dataset_type(tag, previous.type.value),
            "file_size": len(payload),
            "original_filename": filename,
            "updated_by": principal.id,
            "updated_by_name": principal.email,
        }
        if revision_message is not None:
            attempt["revision_message"] = revision_message
        dataset = self._process(previous, principal, filename, payload, tag, content_type,
                                new_attempt=True, **attempt)

        if previous.status == DatasetStatus.COMPLETED:
            notify_users(
                self.notifier,
                farm_recipients(farm, exclude=principal.id),
                f'Dataset "{dataset.name}" was re-uploaded and its processed data changed',
                url=f"/farms/{farm_id}/datasets/{dataset_id}",
                metadata={'farmId': farm_id, 'datasetId': dataset_id, 'status': dataset.status.value},
            )
        return dataset

    # =========================================================================
    # PROCESSING
    # =========================================================================

    def _process(
        self,
        dataset: Dataset,
        principal: Principal,
        filename: Optional[str],
        payload: bytes,
        tag: FormatTag,
        content_type: Optional[str],
        new_attempt: bool = False,
        **attempt_fields: Any
    ) -> Dataset:
        farm_id, dataset_id = dataset.farm_id, dataset.id
        context = LogContext(farm_id=farm_id, entity_id=dataset_id, entity_type="dataset",
                             principal_id=principal.id).to_dict()

        raw_key = self.datasets.store_raw(farm_id, dataset_id, filename, payload, content_type)
        reset = {f: None for f in ATTEMPT_RESULT_FIELDS} if new_attempt else {}
        self.datasets.transition_status(
            farm_id, dataset_id, DatasetStatus.PROCESSING,
            new_attempt=new_attempt,
            **reset,
            **attempt_fields,
            raw_path=raw_key,
        )

        try:
            results = self._ingest(farm_id, dataset_id, payload, tag)
        except ContractViolationError:
            raise
        except Exception as e:
            message = e.message if isinstance(e, ValidationError) else f"Processing failed: {e}"
            logger.warning(
                f"Ingestion of {filename} ({tag.value}) failed: {message}",
                exc_info=not isinstance(e, ValidationError),
                extra={'custom_dimensions': context}
            )
            return self.datasets.transition_status(farm_id, dataset_id, DatasetStatus.FAILED, error=message)

        completed = self.datasets.transition_status(farm_id, dataset_id, DatasetStatus.COMPLETED, **results)
        logger.info(
            f"Dataset {dataset_id} processed as {tag.value}",
            extra={'custom_dimensions': context}
        )
        return completed

    def _ingest(self, farm_id: str, dataset_id: str, payload: bytes, tag: FormatTag) -> Dict[str, Any]:
        """Run the format-specific ingestion and store the processed payload."""
        if tag == FormatTag.TIFF:
            jpeg = transcode_raster(
                payload,
                max_width=self.config.raster_max_width,
                quality=self.config.raster_jpeg_quality,
            )
            return {
                "type": DatasetType.RASTER,
                "raster_path": self.datasets.store_processed_raster(farm_id, dataset_id, jpeg),
                "processed_at": utc_now(),
            }

        result = normalize(
            payload,
            tag,
            projected_x_column=self.config.projected_x_column,
            projected_y_column=self.config.projected_y_column,
            projected_crs=self.config.projected_crs,
        )
        return {
            "record_count": result.record_count,
            "bounds": result.bounds,
            "fields": result.fields,
            "geojson_path": self.datasets.store_processed_geojson(farm_id, dataset_id, result.feature_collection),
            "processed_at": utc_now(),
        }

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _check_size(self, payload: bytes) -> None:
        if not payload:
            raise ValidationError("No file uploaded")
        if len(payload) > self.config.max_upload_bytes:
            raise ValidationError(
                f"File exceeds the {self.config.max_upload_mb} MB upload limit",
                details={'size': len(payload), 'limit': self.config.max_upload_bytes}
            )

    @staticmethod
    def _dataset_type(tag: FormatTag, requested: Optional[str]) -> DatasetType:
        if tag in FORMAT_DATASET_TYPES:
            return FORMAT_DATASET_TYPES[tag]
        if requested:
            try:
                return DatasetType(requested)
            except ValueError as e:
                raise ValidationError(f"Unsupported dataset type: {requested}") from e
        return DatasetType.GEOJSON
