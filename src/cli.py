import argparse
import logging
import sys
from pathlib import Path

import qrcode

from wg_admin.config import DEFAULT_LISTEN_PORT, default_network, store_path
from wg_admin.errors import WgAdminError
from wg_admin.models import Client, Server, parse_address
from wg_admin.repository import Repository
from wg_admin.templates import render_peer_conf


logger = logging.getLogger("wg_admin.cli")


def _network(args):
    if not args.network:
        args.parser.error("no network given (use --network or set WG_ADMIN_NETWORK)")
    return args.repository.find_network(args.network)


def _ip(args, net):
    if args.ip:
        return parse_address(args.ip)
    return args.repository.next_address(net)


def _write_private(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(text)
    # contient une clé privée
    path.chmod(0o600)


# ---------------------------------------------------
# Commandes : réseaux
# ---------------------------------------------------

def cmd_list_networks(args):
    networks = args.repository.networks()
    if not networks:
        logger.info("No networks defined.")
    for net in networks:
        print(f"  {net}")


def cmd_add_network(args):
    net = args.repository.add_network(args.network_cidr)
    print(f"[+] Network {net} was successfully added.")


# ---------------------------------------------------
# Commandes : peers
# ---------------------------------------------------

def _list(args, lister, what):
    net = _network(args)
    peers = lister(net)
    if not peers:
        logger.info("No %s in network %s.", what, net)
    for p in peers:
        print(f"  {p}")


def cmd_list_peers(args):
    _list(args, args.repository.peers, "peers")


def cmd_list_servers(args):
    _list(args, args.repository.servers, "servers")


def cmd_list_clients(args):
    _list(args, args.repository.clients, "clients")


def cmd_add_server(args):
    net = _network(args)

    server = Server(
        name=args.name,
        ip=_ip(args, net),
        port=args.port,
        allowed_ips=args.allowed_ips or net,
        device=args.device,
    )
    server = args.repository.add_peer(net, server)

    print(f"[+] Server added : {server}")


def cmd_add_client(args):
    net = _network(args)

    client = Client(name=args.name, ip=_ip(args, net))
    client = args.repository.add_peer(net, client)

    print(f"[+] Client added : {client}")


# ---------------------------------------------------
# Commandes : export
# ---------------------------------------------------

def _render(args):
    net = _network(args)
    peer = args.repository.find_peer(net, args.name)
    return render_peer_conf(peer, args.repository.peers(net), net)


def cmd_config(args):
    conf = _render(args)

    if args.output:
        path = Path(args.output)
        _write_private(path, conf)
        print(f"[OK] Config written : {path}")
    else:
        print(conf, end="")


def cmd_qr(args):
    conf = _render(args)

    path = Path(args.output or f"configs/{args.name}.png")
    path.parent.mkdir(parents=True, exist_ok=True)
    img = qrcode.make(conf)
    img.save(str(path))
    path.chmod(0o600)

    print(f"[OK] QR code generated : {path}")


# ---------------------------------------------------
# CLI / Parser
# ---------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wg-admin",
        description="wg-admin is an opinionated tool to administer WireGuard configuration.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--store", help="path of the configuration database")
    sub = parser.add_subparsers(dest="cmd")

    def network_opt(p):
        p.add_argument("-n", "--network", default=default_network(), help="network (CIDR)")

    # list-networks
    p = sub.add_parser("list-networks", help="Lists all known networks")
    p.set_defaults(func=cmd_list_networks)

    # add-network
    p = sub.add_parser("add-network", help="Adds a new network")
    p.add_argument("network_cidr", metavar="NETWORK")
    p.set_defaults(func=cmd_add_network)

    # list-peers / list-servers / list-clients
    for name, func in (
        ("list-peers", cmd_list_peers),
        ("list-servers", cmd_list_servers),
        ("list-clients", cmd_list_clients),
    ):
        p = sub.add_parser(name, help=f"Lists all {name.split('-')[1]} of a network")
        network_opt(p)
        p.set_defaults(func=func)

    # add-server
    p = sub.add_parser("add-server", help="Adds a new server with the given public DNS NAME")
    p.add_argument("name")
    network_opt(p)
    p.add_argument("-i", "--ip", help="the (private) IP address of the new server (within the VPN)")
    p.add_argument("-p", "--port", type=int, default=DEFAULT_LISTEN_PORT, help="port to listen on")
    p.add_argument("-a", "--allowed-ips", help="the range of allowed IP addresses that this server is routing")
    p.add_argument("-d", "--device", help="the network device used for forwarding traffic")
    p.set_defaults(func=cmd_add_server)

    # add-client
    p = sub.add_parser("add-client", help="Adds a new client with the given NAME")
    p.add_argument("name")
    network_opt(p)
    p.add_argument("-i", "--ip", help="the IP address of the new client")
    p.set_defaults(func=cmd_add_client)

    # config
    p = sub.add_parser("config", help="Shows the configuration of a peer")
    p.add_argument("name")
    network_opt(p)
    p.add_argument("-o", "--output", help="write the configuration to this file instead of stdout")
    p.set_defaults(func=cmd_config)

    # qr
    p = sub.add_parser("qr", help="Writes the configuration of a peer as a QR code (PNG)")
    p.add_argument("name")
    network_opt(p)
    p.add_argument("-o", "--output", help="PNG file (default: configs/NAME.png)")
    p.set_defaults(func=cmd_qr)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )

    args.parser = parser
    args.repository = Repository(Path(args.store).expanduser() if args.store else store_path())
    logger.info("Using database %s", args.repository.path)

    try:
        args.func(args)
    except (WgAdminError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
