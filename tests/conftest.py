"""Pytest configuration and fixtures for crosstable tests."""

import pytest
from dotenv import load_dotenv
from fakes import BASE_URL, FakeTransport

from crosstable.client import Client
from crosstable.exceptions import TransportError
from crosstable.querydsl.criteria import Circle

# Load environment variables
load_dotenv()


@pytest.fixture
def fake_transport():
    """Recording transport with no network access."""
    return FakeTransport()


@pytest.fixture
def client(fake_transport):
    """Client wired to the fake transport."""
    return Client(transport=fake_transport)


@pytest.fixture
def failing_transport():
    """Transport whose every call fails before a response arrives."""
    transport = FakeTransport()
    transport.fail_with(TransportError("Connection refused", url=BASE_URL))
    return transport


@pytest.fixture(scope="session")
def century_city():
    """5km circle around Century City, Los Angeles."""
    return Circle(34.06018, -118.41835, 5000)
