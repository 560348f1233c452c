"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from discord_rcfeed.messages import Catalog
from discord_rcfeed.wiki import Site, SiteUser

SERVER = "https://wiki.example.org"


@pytest.fixture
def site() -> Site:
    """Create a wiki site with the default URL layout."""
    return Site(server=SERVER)


@pytest.fixture
def catalog() -> Catalog:
    """Create a catalog with the default English messages."""
    return Catalog()


@pytest.fixture
def alice(site: Site) -> SiteUser:
    """Create a sample user."""
    user = site.new_user("Alice")
    assert user is not None
    return user
