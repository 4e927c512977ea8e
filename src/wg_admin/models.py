
# src/wg_admin/models.py
from __future__ import annotations
import ipaddress
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Union

from .config import DEFAULT_LISTEN_PORT
from .errors import DuplicatePeerAddress, DuplicatePeerName, MalformedAddress, MalformedNetwork, WgAdminError
from .keys import derive_public_key, generate_keypair


Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def parse_network(value: object) -> Network:
    """
    '10.1.2.0/24' -> IPv4Network. Les bits d'hôte doivent être à zéro.
    """
    if isinstance(value, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return value
    try:
        return ipaddress.ip_network(str(value).strip())
    except ValueError as exc:
        raise MalformedNetwork(value) from exc


def parse_address(value: object) -> Address:
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    try:
        return ipaddress.ip_address(str(value).strip())
    except ValueError as exc:
        raise MalformedAddress(value) from exc


@dataclass
class Peer:
    name: str
    ip: Address
    public_key: str = ""
    private_key: str = ""

    kind: ClassVar[str] = "peer"

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Peer name must not be empty")
        self.ip = parse_address(self.ip)
        if not self.private_key:
            # la paire est générée une seule fois, à la création
            self.private_key, self.public_key = generate_keypair()
        elif not self.public_key:
            self.public_key = derive_public_key(self.private_key)

    def __str__(self) -> str:
        return f"{self.name} ({self.kind}) {self.ip}"


@dataclass
class Server(Peer):
    port: int = DEFAULT_LISTEN_PORT
    allowed_ips: Optional[Network] = None  # None -> réseau du serveur
    device: Optional[str] = None           # ex "eth0", pour le forwarding

    kind: ClassVar[str] = "server"

    def __post_init__(self) -> None:
        super().__post_init__()
        self.port = int(self.port)
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid listen port {self.port}")
        if self.allowed_ips is not None:
            self.allowed_ips = parse_network(self.allowed_ips)

    @property
    def endpoint(self) -> str:
        return f"{self.name}:{self.port}"

    def __str__(self) -> str:
        line = f"{self.name} ({self.kind}) {self.ip} port {self.port}"
        if self.allowed_ips is not None:
            line += f" allowed {self.allowed_ips}"
        if self.device:
            line += f" via {self.device}"
        return line


@dataclass
class Client(Peer):
    kind: ClassVar[str] = "client"


PEER_TYPES = {cls.kind: cls for cls in (Server, Client)}


@dataclass
class GlobalState:
    # "10.1.2.0/24" -> {nom du peer -> Peer}, dans l'ordre d'insertion
    networks: Dict[str, Dict[str, Peer]] = field(default_factory=dict)


def check_new_peer(net: Network, peers: Dict[str, Peer], peer: Peer) -> Optional[WgAdminError]:
    """
    Retourne l'erreur qui empêche d'ajouter `peer` au réseau, ou None.
    """
    if peer.name in peers:
        return DuplicatePeerName(peer.name, net)

    if peer.ip in {p.ip for p in peers.values()}:
        return DuplicatePeerAddress(peer.ip, net)

    # un serveur peut router une plage externe, un client non
    if isinstance(peer, Client) and peer.ip not in net:
        return MalformedAddress(peer.ip, f"is outside of network {net}")

    return None
