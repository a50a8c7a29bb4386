"""
Persisted Key Layout.

    farms/{farmId}/metadata.json                              Farm
    farms/{farmId}/blocks.json                                FeatureCollection of all blocks
    farms/{farmId}/blocks/{blockId}/revisions.json            Block revisions (newest first)
    farms/{farmId}/datasets/{datasetId}/metadata.json         Dataset
    farms/{farmId}/datasets/{datasetId}/revisions.json        Dataset revisions (newest first)
    farms/{farmId}/datasets/{datasetId}/raw.{ext}             Raw upload
    farms/{farmId}/datasets/{datasetId}/processed.geojson     Normalized FeatureCollection
    farms/{farmId}/datasets/{datasetId}/processed.jpg         Transcoded raster
    farms/{farmId}/dataset-folders.json                       Folder list
"""

FARMS_PREFIX = "farms/"
METADATA_FILENAME = "metadata.json"


def farm_prefix(farm_id: str) -> str:
    return f"farms/{farm_id}/"


def farm_metadata_key(farm_id: str) -> str:
    return f"farms/{farm_id}/{METADATA_FILENAME}"


def blocks_key(farm_id: str) -> str:
    return f"farms/{farm_id}/blocks.json"


def block_revisions_key(farm_id: str, block_id: str) -> str:
    return f"farms/{farm_id}/blocks/{block_id}/revisions.json"


def datasets_prefix(farm_id: str) -> str:
    return f"farms/{farm_id}/datasets/"


def dataset_prefix(farm_id: str, dataset_id: str) -> str:
    return f"farms/{farm_id}/datasets/{dataset_id}/"


def dataset_metadata_key(farm_id: str, dataset_id: str) -> str:
    return f"{dataset_prefix(farm_id, dataset_id)}{METADATA_FILENAME}"


def dataset_revisions_key(farm_id: str, dataset_id: str) -> str:
    return f"{dataset_prefix(farm_id, dataset_id)}revisions.json"


def dataset_raw_key(farm_id: str, dataset_id: str, extension: str) -> str:
    return f"{dataset_prefix(farm_id, dataset_id)}raw.{extension}"


def dataset_processed_geojson_key(farm_id: str, dataset_id: str) -> str:
    return f"{dataset_prefix(farm_id, dataset_id)}processed.geojson"


def dataset_processed_raster_key(farm_id: str, dataset_id: str) -> str:
    return f"{dataset_prefix(farm_id, dataset_id)}processed.jpg"


def dataset_folders_key(farm_id: str) -> str:
    return f"farms/{farm_id}/dataset-folders.json"


def is_dataset_metadata_key(farm_id: str, key: str) -> bool:
    """True for farms/{farmId}/datasets/{datasetId}/metadata.json exactly."""
    prefix = datasets_prefix(farm_id)
    if not key.startswith(prefix):
        return False
    parts = key[len(prefix):].split("/")
    return len(parts) == 2 and parts[1] == METADATA_FILENAME


def is_farm_metadata_key(key: str) -> bool:
    """True for farms/{farmId}/metadata.json exactly."""
    parts = key.split("/")
    return len(parts) == 3 and parts[0] == "farms" and parts[2] == METADATA_FILENAME
