"""
Block repository tests: CRUD, area derivation and revision history.
"""

import pytest

from config.defaults import RevisionDefaults
from exceptions import ForbiddenError, NotFoundError, ValidationError
from infrastructure import paths
from tests.factories.model_factories import make_block_input, make_square


@pytest.fixture
def blocks(repos):
    return repos['block_repo']


class TestCreateBlock:

    def test_area_is_derived(self, blocks, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input(area=1.0))
        assert 900 < block.area < 1100
        assert block.farm_id == farm.id
        assert block.updated_by == owner.id

    def test_stored_as_feature(self, blocks, store, farm, editor):
        block = blocks.create_block(farm.id, editor, make_block_input())
        collection = store.read_json(paths.blocks_key(farm.id))
        assert collection["type"] == "FeatureCollection"
        feature = collection["features"][0]
        assert feature["id"] == block.id
        assert feature["geometry"]["type"] == "Polygon"
        assert feature["properties"]["farmId"] == farm.id

    def test_requires_name(self, blocks, farm, owner):
        with pytest.raises(ValidationError):
            blocks.create_block(farm.id, owner, make_block_input(name=""))

    @pytest.mark.parametrize("geometry", [
        None,
        {"type": "Point", "coordinates": [0.0, 0.0]},
        {"type": "Polygon", "coordinates": "garbage"},
    ])
    def test_rejects_bad_geometry(self, blocks, farm, owner, geometry):
        with pytest.raises(ValidationError):
            blocks.create_block(farm.id, owner, make_block_input(geometry=geometry))

    def test_viewer_forbidden(self, blocks, farm, viewer):
        with pytest.raises(ForbiddenError):
            blocks.create_block(farm.id, viewer, make_block_input())

    def test_stranger_not_found(self, blocks, farm, stranger):
        with pytest.raises(NotFoundError):
            blocks.create_block(farm.id, stranger, make_block_input())


class TestUpdateAndRevert:

    def test_rename_records_previous_state(self, blocks, farm, owner, editor):
        block = blocks.create_block(farm.id, owner, make_block_input(name="Parcelle A"))
        assert blocks.list_revisions(farm.id, block.id, owner) == []

        renamed = blocks.update_block(farm.id, block.id, {"name": "Parcelle B"}, editor,
                                      revision_message="rename")
        assert renamed.name == "Parcelle B"
        assert renamed.revision_message == "rename"
        assert renamed.updated_by == editor.id

        revisions = blocks.list_revisions(farm.id, block.id, owner)
        assert len(revisions) == 1
        assert revisions[0].properties["name"] == "Parcelle A"
        assert revisions[0].updated_by == owner.id

    def test_identity_fields_cannot_change(self, blocks, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input())
        updated = blocks.update_block(farm.id, block.id, {
            "id": "other", "farmId": "other-farm", "area": 5.0,
        }, owner)
        assert updated.id == block.id
        assert updated.farm_id == farm.id
        assert updated.area == pytest.approx(block.area)

    def test_geometry_change_recomputes_area(self, blocks, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input())
        doubled = make_square(side=0.0002843 * 2)
        updated = blocks.update_block(farm.id, block.id, {"geometry": doubled}, owner)
        assert updated.area == pytest.approx(block.area * 4, rel=0.01)

    def test_revert_restores_and_is_undoable(self, blocks, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input(name="Original"))
        blocks.update_block(farm.id, block.id, {"name": "Changed"}, owner)
        target = blocks.list_revisions(farm.id, block.id, owner)[0]

        reverted = blocks.revert_block(farm.id, block.id, target.id, owner)
        assert reverted.name == "Original"
        assert reverted.id == block.id

        revisions = blocks.list_revisions(farm.id, block.id, owner)
        assert len(revisions) == 2
        assert revisions[0].revision_message == f"Reverted to {target.id}"
        assert revisions[0].properties["name"] == "Changed"

    def test_revert_unknown_revision(self, blocks, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input())
        with pytest.raises(NotFoundError):
            blocks.revert_block(farm.id, block.id, "missing", owner)

    def test_revision_cap_evicts_oldest(self, blocks, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input(name="v0"))
        for i in range(1, RevisionDefaults.BLOCK_REVISION_CAP + 2):
            blocks.update_block(farm.id, block.id, {"name": f"v{i}"}, owner)

        revisions = blocks.list_revisions(farm.id, block.id, owner)
        assert len(revisions) == RevisionDefaults.BLOCK_REVISION_CAP
        assert revisions[0].properties["name"] == f"v{RevisionDefaults.BLOCK_REVISION_CAP}"
        assert revisions[-1].properties["name"] == "v1"

    def test_update_missing_block(self, blocks, farm, owner):
        with pytest.raises(NotFoundError):
            blocks.update_block(farm.id, "missing", {"name": "x"}, owner)


class TestDeleteBlock:

    def test_delete_removes_feature_and_history(self, blocks, store, farm, owner):
        block = blocks.create_block(farm.id, owner, make_block_input())
        blocks.update_block(farm.id, block.id, {"name": "again"}, owner)
        blocks.delete_block(farm.id, block.id, owner)

        assert blocks.list_blocks(farm.id, owner)["features"] == []
        assert not store.exists(paths.block_revisions_key(farm.id, block.id))
        with pytest.raises(NotFoundError):
            blocks.get_block(farm.id, block.id, owner)

    def test_delete_missing_block(self, blocks, farm, owner):
        with pytest.raises(NotFoundError):
            blocks.delete_block(farm.id, "missing", owner)
