# src/wg_admin/errors.py
from __future__ import annotations


class WgAdminError(Exception):
    """Base class for every error the CLI reports to the user."""


# ---------- Saisie ----------

class MalformedNetwork(WgAdminError, ValueError):
    def __init__(self, value: object):
        super().__init__(f"'{value}' is not a valid network (expected CIDR like 10.1.2.0/24)")
        self.value = value


class MalformedAddress(WgAdminError, ValueError):
    def __init__(self, value: object, reason: str = "is not a valid IP address"):
        super().__init__(f"'{value}' {reason}")
        self.value = value


# ---------- Réseaux ----------

class NetworkAlreadyExists(WgAdminError):
    def __init__(self, network: object):
        super().__init__(f"Network {network} already exists")
        self.network = network


class UnknownNetwork(WgAdminError):
    def __init__(self, network: object):
        super().__init__(f"Network {network} is unknown")
        self.network = network


class AddressSpaceExhausted(WgAdminError):
    def __init__(self, network: object):
        super().__init__(f"No free IP address left in network {network}")
        self.network = network


# ---------- Peers ----------

class DuplicatePeerName(WgAdminError):
    def __init__(self, name: str, network: object):
        super().__init__(f"A peer named '{name}' already exists in network {network}")
        self.name = name
        self.network = network


class DuplicatePeerAddress(WgAdminError):
    def __init__(self, ip: object, network: object):
        super().__init__(f"Address {ip} is already assigned in network {network}")
        self.ip = ip
        self.network = network


class PeerNotFound(WgAdminError):
    def __init__(self, name: str, network: object):
        super().__init__(f"No peer named '{name}' in network {network}")
        self.name = name
        self.network = network


# ---------- Stockage / clés ----------

class CorruptStore(WgAdminError):
    def __init__(self, path: object, reason: str):
        super().__init__(f"Store {path} is unreadable: {reason}")
        self.path = path


class KeyGenerationError(WgAdminError):
    pass
