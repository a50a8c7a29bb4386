"""
Dataset folder tests.
"""

import pytest

from core.models import ROOT_FOLDER_ID
from exceptions import ForbiddenError, NotFoundError, ValidationError
from tests.factories.model_factories import make_dataset_input


@pytest.fixture
def folders(repos):
    return repos['folder_repo']


class TestFolders:

    def test_create_defaults_to_root(self, folders, farm, editor):
        folder = folders.create_folder(farm.id, editor, "  Soil samples ")
        assert folder.name == "Soil samples"
        assert folder.parent_id == ROOT_FOLDER_ID
        assert [f.id for f in folders.list_folders(farm.id, editor)] == [folder.id]

    def test_nested_parent_must_exist(self, folders, farm, owner):
        parent = folders.create_folder(farm.id, owner, "2024")
        child = folders.create_folder(farm.id, owner, "June", parent_id=parent.id)
        assert child.parent_id == parent.id
        with pytest.raises(ValidationError):
            folders.create_folder(farm.id, owner, "Orphan", parent_id="missing")

    def test_name_required(self, folders, farm, owner):
        with pytest.raises(ValidationError):
            folders.create_folder(farm.id, owner, "   ")

    def test_update_and_self_parent(self, folders, farm, owner):
        folder = folders.create_folder(farm.id, owner, "Drone")
        renamed = folders.update_folder(farm.id, folder.id, {"name": "Drone flights"}, owner)
        assert renamed.name == "Drone flights"
        assert renamed.created_at == folder.created_at
        with pytest.raises(ValidationError):
            folders.update_folder(farm.id, folder.id, {"parentId": folder.id}, owner)

    def test_viewer_cannot_create(self, folders, farm, viewer):
        with pytest.raises(ForbiddenError):
            folders.create_folder(farm.id, viewer, "Nope")

    def test_delete_leaves_datasets(self, repos, folders, farm, owner):
        folder = folders.create_folder(farm.id, owner, "Temp")
        dataset = repos['dataset_repo'].create_dataset(
            farm.id, owner, make_dataset_input(folderId=folder.id)
        )
        folders.delete_folder(farm.id, folder.id, owner)

        assert folders.list_folders(farm.id, owner) == []
        kept = repos['dataset_repo'].get_dataset(farm.id, dataset.id, owner)
        assert kept.folder_id == folder.id
        with pytest.raises(NotFoundError):
            folders.delete_folder(farm.id, folder.id, owner)
