"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported and
exercised against the in-memory document store, without Azure credentials.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'infrastructure', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so get_config() never reaches Azure.
    """
    defaults = {
        "STORAGE_BACKEND": "memory",
        "ENVIRONMENT": "dev",
        "LOG_LEVEL": "WARNING",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from a freshly loaded config singleton."""
    from config import reset_config
    reset_config()
    yield
    reset_config()


# ============================================================================
# PRINCIPALS
# ============================================================================

@pytest.fixture
def owner():
    from core.models import Principal
    return Principal(id="user-owner", email="owner@example.com")


@pytest.fixture
def editor():
    from core.models import Principal
    return Principal(id="user-editor", email="editor@example.com")


@pytest.fixture
def viewer():
    from core.models import Principal
    return Principal(id="user-viewer", email="viewer@example.com")


@pytest.fixture
def stranger():
    from core.models import Principal
    return Principal(id="user-stranger", email="stranger@example.com")


# ============================================================================
# WIRED REPOSITORIES
# ============================================================================

class RecordingNotifier:
    """Notifier test double that keeps every call."""

    def __init__(self):
        self.calls = []

    def notify(self, recipients, message, url=None, metadata=None):
        self.calls.append({
            "recipients": list(recipients),
            "message": message,
            "url": url,
            "metadata": metadata,
        })


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store():
    from infrastructure.document_store import InMemoryDocumentStore
    return InMemoryDocumentStore()


@pytest.fixture
def repos(store, notifier):
    from config import AppConfig
    from infrastructure.factory import RepositoryFactory
    return RepositoryFactory.create_repositories(store=store, config=AppConfig(), notifier=notifier)


@pytest.fixture
def farm(repos, owner, editor, viewer):
    """Farm owned by `owner` with an editor and a viewer collaborator."""
    return repos['farm_repo'].create_farm(owner, {
        "name": "Domaine Test",
        "location": {"latitude": 44.84, "longitude": -0.58, "address": "Bordeaux"},
        "collaborators": [
            {"userId": editor.id, "email": editor.email, "role": "editor"},
            {"userId": viewer.id, "email": viewer.email, "role": "viewer"},
        ],
    })
