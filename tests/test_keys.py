import base64
import subprocess

import pytest

from wg_admin import keys
from wg_admin.errors import KeyGenerationError
from wg_admin.models import Client


def test_pynacl_fallback_without_wg(monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("wg")

    monkeypatch.setattr(keys.subprocess, "run", missing)

    priv, pub = keys.generate_keypair()
    assert len(base64.b64decode(priv)) == 32
    assert len(base64.b64decode(pub)) == 32
    assert keys.derive_public_key(priv) == pub


def test_uses_wg_when_available(monkeypatch):
    calls = []

    def fake_run(cmd, stdin=None):
        calls.append((cmd, stdin))
        return "PRIV" if cmd == ["wg", "genkey"] else "PUB"

    monkeypatch.setattr(keys, "_run", fake_run)

    assert keys.generate_keypair() == ("PRIV", "PUB")
    assert calls == [(["wg", "genkey"], None), (["wg", "pubkey"], "PRIV\n")]


def test_wg_failure_is_reported(monkeypatch):
    def failing(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd, stderr="boom")

    monkeypatch.setattr(keys.subprocess, "run", failing)

    with pytest.raises(KeyGenerationError, match="boom"):
        keys.generate_keypair()


def test_invalid_private_key():
    with pytest.raises(KeyGenerationError):
        keys.derive_public_key("not base64!")


def test_peer_generates_keys_once(fake_keys):
    alice = Client(name="alice", ip="10.1.2.2")
    assert (alice.private_key, alice.public_key) == ("private-1", "public-1")


def test_peer_derives_missing_public_key():
    priv = base64.b64encode(bytes(range(32))).decode("ascii")
    alice = Client(name="alice", ip="10.1.2.2", private_key=priv)
    assert alice.public_key == keys.derive_public_key(priv)
    assert alice.private_key == priv
