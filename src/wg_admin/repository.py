# src/wg_admin/repository.py
from __future__ import annotations
import dataclasses
import logging
from pathlib import Path
from typing import List, Type, TypeVar

from .errors import NetworkAlreadyExists, PeerNotFound, UnknownNetwork
from .ipam import next_free_address, used_addresses
from .models import Address, Client, GlobalState, Network, Peer, Server, check_new_peer, parse_network
from .state import load_state, save_state


logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Peer)


class Repository:
    """
    Stockage persistant des réseaux et de leurs peers.

    Chaque opération relit le fichier ; chaque mutation le réécrit en entier
    avant de rendre la main. Pas de verrou entre processus : deux appels
    concurrents à next_address() peuvent renvoyer la même adresse.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # ---------- Réseaux ----------

    def networks(self) -> List[Network]:
        return [parse_network(cidr) for cidr in self._load().networks]

    def add_network(self, cidr) -> Network:
        net = parse_network(cidr)
        state = self._load()

        if str(net) in state.networks:
            raise NetworkAlreadyExists(net)

        state.networks[str(net)] = {}
        self._save(state)
        logger.info("Added network %s", net)
        return net

    def find_network(self, cidr) -> Network:
        net, _ = self._lookup(self._load(), cidr)
        return net

    # ---------- Peers ----------

    def add_peer(self, cidr, peer: P) -> P:
        state = self._load()
        net, peers = self._lookup(state, cidr)

        error = check_new_peer(net, peers, peer)
        if error is not None:
            raise error

        if isinstance(peer, Server) and peer.allowed_ips is None:
            peer = dataclasses.replace(peer, allowed_ips=net)

        peers[peer.name] = peer
        self._save(state)
        logger.info("Added %s %s (%s) to network %s", peer.kind, peer.name, peer.ip, net)
        return peer

    def next_address(self, cidr) -> Address:
        net, peers = self._lookup(self._load(), cidr)
        return next_free_address(net, used_addresses(peers.values()))

    def find_peer(self, cidr, name: str) -> Peer:
        net, peers = self._lookup(self._load(), cidr)
        try:
            return peers[name]
        except KeyError:
            raise PeerNotFound(name, net) from None

    def peers(self, cidr) -> List[Peer]:
        _, peers = self._lookup(self._load(), cidr)
        return list(peers.values())

    def servers(self, cidr) -> List[Server]:
        return self._of_kind(cidr, Server)

    def clients(self, cidr) -> List[Client]:
        return self._of_kind(cidr, Client)

    # ---------- Interne ----------

    def _of_kind(self, cidr, cls: Type[P]) -> List[P]:
        return [p for p in self.peers(cidr) if isinstance(p, cls)]

    def _lookup(self, state: GlobalState, cidr):
        net = parse_network(cidr)
        try:
            return net, state.networks[str(net)]
        except KeyError:
            raise UnknownNetwork(net) from None

    def _load(self) -> GlobalState:
        return load_state(self._path)

    def _save(self, state: GlobalState) -> None:
        save_state(state, self._path)
