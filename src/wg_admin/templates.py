# src/wg_admin/templates.py
from __future__ import annotations
from typing import Iterable

from .config import PERSISTENT_KEEPALIVE
from .models import Client, Network, Peer, Server


HEADER = "# generated by wg-admin"


def render_server_conf(server: Server, clients: Iterable[Client], network: Network) -> str:
    lines = [
        f"# WireGuard configuration for {server.name}",
        HEADER,
        "",
        "[Interface]",
        f"Address = {server.ip}/{network.prefixlen}",
        f"ListenPort = {server.port}",
        f"PrivateKey = {server.private_key}",
    ]

    if server.device:
        lines += [
            f"PostUp = iptables -A FORWARD -i %i -j ACCEPT; iptables -A FORWARD -o %i -j ACCEPT; "
            f"iptables -t nat -A POSTROUTING -o {server.device} -j MASQUERADE",
            f"PostDown = iptables -D FORWARD -i %i -j ACCEPT; iptables -D FORWARD -o %i -j ACCEPT; "
            f"iptables -t nat -D POSTROUTING -o {server.device} -j MASQUERADE",
        ]
    lines.append("")  # blank line

    for c in clients:
        lines.append("[Peer]")
        lines.append(f"# Name = {c.name}")
        lines.append(f"PublicKey = {c.public_key}")
        lines.append(f"AllowedIPs = {c.ip}/{c.ip.max_prefixlen}")
        lines.append("")  # blank

    return "\n".join(lines).strip() + "\n"


def render_client_conf(client: Client, servers: Iterable[Server], network: Network) -> str:
    lines = [
        f"# WireGuard configuration for {client.name}",
        HEADER,
        "",
        "[Interface]",
        f"PrivateKey = {client.private_key}",
        f"Address = {client.ip}/{network.prefixlen}",
        "",
    ]

    for s in servers:
        allowed = s.allowed_ips if s.allowed_ips is not None else network
        lines += [
            "[Peer]",
            f"PublicKey = {s.public_key}",
            f"Endpoint = {s.endpoint}",
            f"AllowedIPs = {allowed}",
            f"PersistentKeepalive = {PERSISTENT_KEEPALIVE}",
            "",
        ]

    return "\n".join(lines).strip() + "\n"


def render_peer_conf(peer: Peer, others: Iterable[Peer], network: Network) -> str:
    """
    Choisit le gabarit selon le type du peer. `others` contient les peers
    du réseau ; seuls ceux de l'autre type sont utilisés.
    """
    others = list(others)
    if isinstance(peer, Server):
        return render_server_conf(peer, [p for p in others if isinstance(p, Client)], network)
    if isinstance(peer, Client):
        return render_client_conf(peer, [p for p in others if isinstance(p, Server)], network)
    raise TypeError(f"No template defined for {type(peer).__name__}")
