"""
Farm repository tests: creation, protected fields, visibility and deletion.
"""

import pytest

from exceptions import ForbiddenError, NotFoundError, ValidationError
from infrastructure import paths


class TestCreateFarm:

    def test_creates_metadata_and_empty_blocks(self, repos, store, owner):
        farm = repos['farm_repo'].create_farm(owner, {
            "name": "Clos Nord",
            "location": {"latitude": 45.0, "longitude": 0.1},
        })
        assert farm.owner == owner.id
        assert farm.block_count == 0 and farm.dataset_count == 0 and farm.total_area == 0.0
        assert store.read_json(paths.farm_metadata_key(farm.id))["name"] == "Clos Nord"
        assert store.read_json(paths.blocks_key(farm.id)) == {"type": "FeatureCollection", "features": []}

    @pytest.mark.parametrize("data", [
        {"name": "No location"},
        {"location": {"latitude": 1.0, "longitude": 2.0}},
        {},
    ])
    def test_name_and_location_required(self, repos, owner, data):
        with pytest.raises(ValidationError):
            repos['farm_repo'].create_farm(owner, data)

    def test_client_cannot_choose_owner_or_rollups(self, repos, owner):
        farm = repos['farm_repo'].create_farm(owner, {
            "name": "Sneaky",
            "location": {"latitude": 1.0, "longitude": 2.0},
            "owner": "someone-else",
            "blockCount": 99,
            "totalArea": 12345.0,
        })
        assert farm.owner == owner.id
        assert farm.block_count == 0
        assert farm.total_area == 0.0


class TestReadFarm:

    def test_collaborators_can_read(self, repos, farm, editor, viewer):
        assert repos['farm_repo'].get_farm(farm.id, editor).id == farm.id
        assert repos['farm_repo'].get_farm(farm.id, viewer).id == farm.id

    def test_stranger_gets_not_found(self, repos, farm, stranger):
        with pytest.raises(NotFoundError):
            repos['farm_repo'].get_farm(farm.id, stranger)

    def test_missing_farm_is_not_found(self, repos, owner):
        with pytest.raises(NotFoundError):
            repos['farm_repo'].get_farm("no-such-farm", owner)

    def test_list_farms_filters_by_access(self, repos, farm, owner, viewer, stranger):
        other = repos['farm_repo'].create_farm(stranger, {
            "name": "Elsewhere",
            "location": {"latitude": 1.0, "longitude": 2.0},
        })
        assert [f.id for f in repos['farm_repo'].list_farms(viewer)] == [farm.id]
        assert [f.id for f in repos['farm_repo'].list_farms(stranger)] == [other.id]
        assert farm.id in {f.id for f in repos['farm_repo'].list_farms(owner)}

    def test_list_farms_skips_corrupt_documents(self, repos, store, farm, owner):
        store.write(paths.farm_metadata_key("broken"), b"{oops")
        assert [f.id for f in repos['farm_repo'].list_farms(owner)] == [farm.id]


class TestUpdateFarm:

    def test_merges_patch_and_protects_identity(self, repos, farm, editor):
        updated = repos['farm_repo'].update_farm(farm.id, editor, {
            "name": "Renamed",
            "id": "hijack",
            "owner": editor.id,
            "blockCount": 42,
        })
        assert updated.name == "Renamed"
        assert updated.id == farm.id
        assert updated.owner == farm.owner
        assert updated.block_count == 0
        assert updated.created_at == farm.created_at

    def test_unknown_keys_survive(self, repos, farm, owner):
        repos['farm_repo'].update_farm(farm.id, owner, {"appellation": "Pessac-Leognan"})
        stored = repos['store'].read_json(paths.farm_metadata_key(farm.id))
        assert stored["appellation"] == "Pessac-Leognan"

    def test_viewer_cannot_update(self, repos, farm, viewer):
        with pytest.raises(ForbiddenError):
            repos['farm_repo'].update_farm(farm.id, viewer, {"name": "Nope"})

    def test_empty_name_rejected(self, repos, farm, owner):
        with pytest.raises(ValidationError):
            repos['farm_repo'].update_farm(farm.id, owner, {"name": ""})


class TestDeleteFarm:

    def test_owner_deletes_everything_under_prefix(self, repos, store, farm, owner):
        store.write_json(paths.dataset_metadata_key(farm.id, "d1"), {"x": 1})
        deleted = repos['farm_repo'].delete_farm(farm.id, owner)
        assert paths.farm_metadata_key(farm.id) in deleted
        assert store.list(paths.farm_prefix(farm.id)) == []

    def test_editor_cannot_delete(self, repos, farm, editor):
        with pytest.raises(ForbiddenError):
            repos['farm_repo'].delete_farm(farm.id, editor)

    def test_stranger_gets_not_found(self, repos, farm, stranger):
        with pytest.raises(NotFoundError):
            repos['farm_repo'].delete_farm(farm.id, stranger)
