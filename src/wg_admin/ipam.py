# src/wg_admin/ipam.py
from __future__ import annotations
import ipaddress
from typing import Iterable, Set, Union

from .errors import AddressSpaceExhausted
from .models import Address, Network, Peer


def host_range(net: Network) -> range:
    """
    Adresses utilisables (entiers), sans l'adresse réseau ni le broadcast.
    Vide pour /31 et /32 (ou /127, /128 en IPv6).
    """
    first = int(net.network_address) + 1
    last = int(net.broadcast_address) - 1
    return range(first, max(first, last + 1))


def used_addresses(peers: Iterable[Peer]) -> Set[Address]:
    return {p.ip for p in peers}


def next_free_address(net: Network, used: Iterable[Union[Address, int]]) -> Address:
    """
    Retourne la plus petite adresse hôte de `net` absente de `used`.
    Ne réserve rien : deux appels identiques donnent la même adresse.
    Les adresses d'une autre version IP que `net` sont ignorées.
    """
    taken = {int(u) for u in used if isinstance(u, int) or u.version == net.version}

    for candidate in host_range(net):
        if candidate not in taken:
            if net.version == 4:
                return ipaddress.IPv4Address(candidate)
            return ipaddress.IPv6Address(candidate)

    raise AddressSpaceExhausted(net)
