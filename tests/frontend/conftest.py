import pytest

from backend.auth import create_access_token
from frontend.api import LibraryClient
from frontend.pages import CategoryManagementPage, ProfilePage


@pytest.fixture(scope="function")
def anonymous_api(client):
    # TestClient is an httpx.Client bound to the app
    return LibraryClient(http=client)


@pytest.fixture(scope="function")
def reader_api(client, reader):
    return LibraryClient(token=create_access_token(reader), http=client)


@pytest.fixture(scope="function")
def librarian_api(client, librarian):
    return LibraryClient(token=create_access_token(librarian), http=client)


@pytest.fixture(scope="function")
def category_page(librarian_api):
    return CategoryManagementPage(client=librarian_api)


@pytest.fixture(scope="function")
def profile_page(reader_api):
    return ProfilePage(client=reader_api)
