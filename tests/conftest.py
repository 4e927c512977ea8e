import itertools

import pytest

from wg_admin.repository import Repository


@pytest.fixture(autouse=True)
def fake_keys(monkeypatch):
    """Deterministic key pairs, so tests never shell out to wg."""
    counter = itertools.count(1)

    def generate_keypair():
        n = next(counter)
        return f"private-{n}", f"public-{n}"

    monkeypatch.setattr("wg_admin.models.generate_keypair", generate_keypair)
    return generate_keypair


@pytest.fixture
def store(tmp_path):
    return tmp_path / "wg-admin.json"


@pytest.fixture
def repo(store):
    return Repository(store)
