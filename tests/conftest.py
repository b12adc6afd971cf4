import pytest

from fakes import FakeWeb


@pytest.fixture
def web():
    return FakeWeb()
