import pytest
from fastapi.testclient import TestClient

from database import MenuStore
from main import app
from models import MenuItemCreate
from routers.menu import get_menu_service
from services import MenuService


@pytest.fixture
def store():
    return MenuStore()


@pytest.fixture
def service(store):
    return MenuService(store)


@pytest.fixture
def make_menu(service):
    """Create a menu through the service, optionally under ``parent``."""

    def _make(name, parent=None, label=None):
        return service.create(
            MenuItemCreate(
                name=name,
                label=label or name.title(),
                parent_id=parent.id if parent else None,
            )
        )

    return _make


@pytest.fixture
def client(service):
    """HTTP client wired to an empty, test-owned menu service."""
    app.dependency_overrides[get_menu_service] = lambda: service
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
