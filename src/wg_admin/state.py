# src/wg_admin/state.py
from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .config import store_path
from .errors import CorruptStore
from .models import PEER_TYPES, GlobalState, Peer, Server, check_new_peer, parse_network


logger = logging.getLogger(__name__)

STATE_VERSION = 1


def peer_to_dict(peer: Peer) -> dict:
    data = {
        "kind": peer.kind,
        "name": peer.name,
        "ip": str(peer.ip),
        "public_key": peer.public_key,
        "private_key": peer.private_key,
    }
    if isinstance(peer, Server):
        data["port"] = peer.port
        data["allowed_ips"] = str(peer.allowed_ips) if peer.allowed_ips is not None else None
        data["device"] = peer.device
    return data


def dict_to_peer(data: dict) -> Peer:
    cls = PEER_TYPES.get(data.get("kind"))
    if cls is None:
        raise ValueError(f"unknown peer kind {data.get('kind')!r}")

    # les clés stockées ne sont jamais régénérées au chargement
    for key_field in ("public_key", "private_key"):
        if not data[key_field]:
            raise ValueError(f"peer {data['name']!r} has an empty {key_field}")

    kwargs = dict(
        name=data["name"],
        ip=data["ip"],
        public_key=data["public_key"],
        private_key=data["private_key"],
    )
    if cls is Server:
        kwargs["port"] = data["port"]
        kwargs["allowed_ips"] = data.get("allowed_ips")
        kwargs["device"] = data.get("device")
    return cls(**kwargs)


def state_to_dict(state: GlobalState) -> dict:
    return {
        "version": STATE_VERSION,
        "networks": {
            cidr: {"peers": [peer_to_dict(p) for p in peers.values()]}
            for cidr, peers in state.networks.items()
        },
    }


def dict_to_state(data: dict) -> GlobalState:
    state = GlobalState()
    for cidr, net_data in data.get("networks", {}).items():
        net = parse_network(cidr)
        peers = {}
        for p in net_data.get("peers", []):
            peer = dict_to_peer(p)
            error = check_new_peer(net, peers, peer)
            if error is not None:
                raise ValueError(str(error))
            peers[peer.name] = peer
        state.networks[str(net)] = peers
    return state


def load_state(path: Optional[Path] = None) -> GlobalState:
    """
    Charge le fichier d'état. Un fichier absent correspond à un état vide.
    """
    path = path or store_path()
    if not path.exists():
        logger.debug("Store %s does not exist yet, starting empty", path)
        return GlobalState()

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top-level value is not an object")
        state = dict_to_state(data)
    except (KeyError, TypeError, AttributeError) as exc:
        raise CorruptStore(path, f"missing or invalid field {exc}") from exc
    except ValueError as exc:
        raise CorruptStore(path, str(exc)) from exc

    logger.debug("Loaded %d network(s) from %s", len(state.networks), path)
    return state


def save_state(state: GlobalState, path: Optional[Path] = None) -> None:
    """
    Écrit l'état complet dans un fichier temporaire puis le renomme
    par-dessus l'ancien : le fichier est soit l'ancien, soit le nouveau.
    """
    path = path or store_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = state_to_dict(state)

    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        # mkstemp crée le fichier en 600 : il contient des clés privées
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise

    logger.debug("Saved %d network(s) to %s", len(state.networks), path)
