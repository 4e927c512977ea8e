# src/wg_admin/keys.py
from __future__ import annotations
import base64
import logging
import subprocess
from typing import List

from nacl.public import PrivateKey

from .errors import KeyGenerationError


logger = logging.getLogger(__name__)


def _run(cmd: List[str], stdin: str | None = None) -> str:
    return subprocess.run(cmd, input=stdin, capture_output=True, text=True, check=True).stdout.strip()


def derive_public_key(private_key: str) -> str:
    """
    Calcule la clé publique Curve25519 (base64) d'une clé privée WireGuard.
    """
    try:
        raw = base64.b64decode(private_key.strip(), validate=True)
        public = PrivateKey(raw).public_key
    except (ValueError, TypeError) as exc:
        raise KeyGenerationError(f"Invalid private key: {exc}") from exc
    return base64.b64encode(bytes(public)).decode("ascii")


def generate_keypair() -> tuple[str, str]:
    """
    Retourne (private_key, public_key).

    Utilise wg(8) si disponible, sinon génère la paire avec PyNaCl
    (même courbe que WireGuard).
    """
    try:
        priv = _run(["wg", "genkey"])
        pub = _run(["wg", "pubkey"], stdin=priv + "\n")
        return priv, pub
    except FileNotFoundError:
        logger.debug("wg binary not found, generating key pair with PyNaCl")
    except subprocess.CalledProcessError as exc:
        raise KeyGenerationError(f"wg failed: {exc.stderr.strip() or exc}") from exc

    key = PrivateKey.generate()
    priv = base64.b64encode(bytes(key)).decode("ascii")
    pub = base64.b64encode(bytes(key.public_key)).decode("ascii")
    return priv, pub
