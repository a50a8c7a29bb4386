"""
Dataset repository tests: metadata CRUD, revisions, payload storage and
status transitions.
"""

import pytest

from config.defaults import RevisionDefaults
from core.models import DatasetStatus, DatasetType
from exceptions import ForbiddenError, NotFoundError, ValidationError
from infrastructure import paths
from infrastructure.dataset_repository import raw_extension
from tests.factories.model_factories import make_dataset_input, make_feature_collection


@pytest.fixture
def datasets(repos):
    return repos['dataset_repo']


class TestCreateAndRead:

    def test_create_defaults(self, datasets, farm, editor):
        dataset = datasets.create_dataset(farm.id, editor, make_dataset_input())
        assert dataset.status == DatasetStatus.UPLOADING
        assert dataset.type == DatasetType.CSV
        assert dataset.uploaded_by == editor.id
        assert dataset.collected_at is not None

    def test_unknown_type_rejected(self, datasets, farm, owner):
        with pytest.raises(ValidationError):
            datasets.create_dataset(farm.id, owner, make_dataset_input(type="spreadsheet"))

    def test_name_required(self, datasets, farm, owner):
        with pytest.raises(ValidationError):
            datasets.create_dataset(farm.id, owner, make_dataset_input(name=""))

    def test_viewer_reads_but_cannot_create(self, datasets, farm, owner, viewer):
        created = datasets.create_dataset(farm.id, owner, make_dataset_input())
        assert datasets.get_dataset(farm.id, created.id, viewer).id == created.id
        with pytest.raises(ForbiddenError):
            datasets.create_dataset(farm.id, viewer, make_dataset_input())

    def test_list_newest_first(self, datasets, farm, owner):
        first = datasets.create_dataset(farm.id, owner, make_dataset_input())
        second = datasets.create_dataset(farm.id, owner, make_dataset_input())
        listed = datasets.list_datasets(farm.id, owner)
        assert {d.id for d in listed} == {first.id, second.id}
        assert listed[0].created_at >= listed[1].created_at

    def test_missing_dataset(self, datasets, farm, owner):
        with pytest.raises(NotFoundError):
            datasets.get_dataset(farm.id, "missing", owner)


class TestUpdateAndRevert:

    def test_update_snapshots_previous_state(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input(name="Before"))
        updated = datasets.update_dataset(farm.id, dataset.id, {"name": "After", "uploadedBy": "x"}, owner)
        assert updated.name == "After"
        assert updated.uploaded_by == owner.id

        revisions = datasets.list_revisions(farm.id, dataset.id, owner)
        assert [r.snapshot["name"] for r in revisions] == ["Before"]

    def test_update_cannot_complete_dataset(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        datasets.transition_status(farm.id, dataset.id, DatasetStatus.PROCESSING)

        updated = datasets.update_dataset(farm.id, dataset.id, {"status": "completed", "name": "Renamed"}, owner)
        assert updated.name == "Renamed"
        assert updated.status == DatasetStatus.PROCESSING
        assert datasets.get_dataset(farm.id, dataset.id, owner).status == DatasetStatus.PROCESSING

    def test_update_keeps_payload_pointers(self, datasets, store, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        datasets.transition_status(farm.id, dataset.id, DatasetStatus.PROCESSING)
        key = datasets.store_processed_geojson(farm.id, dataset.id, make_feature_collection([1, 2]))
        datasets.transition_status(farm.id, dataset.id, DatasetStatus.COMPLETED, geojson_path=key, record_count=2)

        updated = datasets.update_dataset(
            farm.id, dataset.id,
            {"geojsonPath": "nowhere.geojson", "recordCount": 99, "error": "x"},
            owner
        )
        assert updated.status == DatasetStatus.COMPLETED
        assert updated.geojson_path == key
        assert updated.record_count == 2
        assert updated.error is None
        assert store.exists(updated.geojson_path)

    def test_revert_keeps_status(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input(name="One"))
        datasets.update_dataset(farm.id, dataset.id, {"name": "Two"}, owner)
        target = datasets.list_revisions(farm.id, dataset.id, owner)[0]
        assert target.snapshot["status"] == DatasetStatus.UPLOADING.value

        datasets.transition_status(farm.id, dataset.id, DatasetStatus.PROCESSING)
        datasets.transition_status(farm.id, dataset.id, DatasetStatus.FAILED, error="boom")

        reverted = datasets.revert_dataset(farm.id, dataset.id, target.id, owner)
        assert reverted.name == "One"
        assert reverted.status == DatasetStatus.FAILED
        assert reverted.error == "boom"

    def test_revert(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input(name="One"))
        datasets.update_dataset(farm.id, dataset.id, {"name": "Two"}, owner)
        target = datasets.list_revisions(farm.id, dataset.id, owner)[0]

        reverted = datasets.revert_dataset(farm.id, dataset.id, target.id, owner, revision_message="undo")
        assert reverted.name == "One"
        assert reverted.revision_message == "undo"
        newest = datasets.list_revisions(farm.id, dataset.id, owner)[0]
        assert newest.revision_message == f"Reverted to {target.id}: undo"

    def test_revision_cap_evicts_oldest(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input(name="v0"))
        for i in range(1, RevisionDefaults.DATASET_REVISION_CAP + 2):
            datasets.update_dataset(farm.id, dataset.id, {"name": f"v{i}"}, owner)

        revisions = datasets.list_revisions(farm.id, dataset.id, owner)
        assert len(revisions) == RevisionDefaults.DATASET_REVISION_CAP
        assert revisions[0].snapshot["name"] == f"v{RevisionDefaults.DATASET_REVISION_CAP}"
        assert revisions[-1].snapshot["name"] == "v1"


class TestPayloadsAndStatus:

    def test_raw_extension(self):
        assert raw_extension("Samples.CSV") == "csv"
        assert raw_extension("noext") == "dat"
        assert raw_extension(None) == "dat"

    def test_completed_requires_payload(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        datasets.transition_status(farm.id, dataset.id, DatasetStatus.PROCESSING)
        with pytest.raises(ValidationError):
            datasets.transition_status(
                farm.id, dataset.id, DatasetStatus.COMPLETED,
                geojson_path=paths.dataset_processed_geojson_key(farm.id, dataset.id)
            )

    def test_full_lifecycle(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        raw_key = datasets.store_raw(farm.id, dataset.id, "points.csv", b"lat,lon\n", "text/csv")
        assert raw_key == paths.dataset_raw_key(farm.id, dataset.id, "csv")

        datasets.transition_status(farm.id, dataset.id, DatasetStatus.PROCESSING, raw_path=raw_key)
        collection = make_feature_collection([1, 2, 3])
        key = datasets.store_processed_geojson(farm.id, dataset.id, collection)
        done = datasets.transition_status(
            farm.id, dataset.id, DatasetStatus.COMPLETED, geojson_path=key, record_count=3
        )
        assert done.status == DatasetStatus.COMPLETED
        assert done.record_count == 3
        assert datasets.read_processed_geojson(farm.id, dataset.id, owner) == collection

    def test_processed_geojson_absent_until_completed(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        assert datasets.read_processed_geojson(farm.id, dataset.id, owner) is None

    def test_illegal_transition(self, datasets, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        datasets.transition_status(farm.id, dataset.id, DatasetStatus.FAILED, error="boom")
        with pytest.raises(ValidationError):
            datasets.transition_status(farm.id, dataset.id, DatasetStatus.UPLOADING)

    def test_delete_removes_prefix(self, datasets, store, farm, owner):
        dataset = datasets.create_dataset(farm.id, owner, make_dataset_input())
        datasets.store_raw(farm.id, dataset.id, "a.csv", b"x")
        deleted = datasets.delete_dataset(farm.id, dataset.id, owner)
        assert len(deleted) == 2
        assert store.list(paths.dataset_prefix(farm.id, dataset.id)) == []
        with pytest.raises(NotFoundError):
            datasets.delete_dataset(farm.id, dataset.id, owner)
