import pytest

from fakes import FakeClock, StubIdentities


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def identities():
    return StubIdentities()
