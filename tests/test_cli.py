import stat

import pytest

import cli
from wg_admin.models import Server
from wg_admin.repository import Repository


NET = "10.1.2.0/24"


@pytest.fixture
def run(store, capsys, monkeypatch):
    monkeypatch.delenv("WG_ADMIN_NETWORK", raising=False)

    def run(*argv):
        code = cli.main(["--store", str(store), *argv])
        out, err = capsys.readouterr()
        return code, out, err

    return run


def test_no_command_prints_help(run):
    code, out, _ = run()
    assert code == 0
    assert "usage: wg-admin" in out


def test_add_and_list_networks(run):
    assert run("add-network", NET)[0] == 0
    code, out, _ = run("list-networks")
    assert code == 0
    assert out.split() == [NET]


def test_duplicate_network_is_an_error(run):
    run("add-network", NET)
    code, _, err = run("add-network", NET)
    assert code == 1
    assert err.startswith("Error: Network 10.1.2.0/24 already exists")


def test_add_peers_with_automatic_addresses(run, store):
    run("add-network", NET)
    assert run("add-server", "vpn.example.com", "-n", NET, "-d", "eth0")[0] == 0
    assert run("add-client", "alice", "-n", NET)[0] == 0

    repo = Repository(store)
    server = repo.find_peer(NET, "vpn.example.com")
    assert isinstance(server, Server)
    assert str(server.ip) == "10.1.2.1"
    assert str(server.allowed_ips) == NET
    assert server.device == "eth0"
    assert str(repo.find_peer(NET, "alice").ip) == "10.1.2.2"

    code, out, _ = run("list-clients", "-n", NET)
    assert code == 0
    assert "alice (client) 10.1.2.2" in out


def test_network_from_environment(run, monkeypatch):
    run("add-network", NET)
    monkeypatch.setenv("WG_ADMIN_NETWORK", NET)
    assert run("add-client", "alice")[0] == 0
    code, out, _ = run("list-peers")
    assert "alice" in out


def test_missing_network_is_a_usage_error(run):
    with pytest.raises(SystemExit) as exc:
        run("list-peers")
    assert exc.value.code == 2


def test_explicit_ip(run, store):
    run("add-network", NET)
    run("add-client", "alice", "-n", NET, "-i", "10.1.2.42")
    assert str(Repository(store).find_peer(NET, "alice").ip) == "10.1.2.42"


def test_bad_ip_is_an_error(run):
    run("add-network", NET)
    code, _, err = run("add-client", "alice", "-n", NET, "-i", "10.1.2.300")
    assert code == 1
    assert "10.1.2.300" in err


def test_unknown_network_is_an_error(run):
    code, _, err = run("add-client", "alice", "-n", NET)
    assert code == 1
    assert "unknown" in err


def test_config_to_stdout(run):
    run("add-network", NET)
    run("add-server", "vpn.example.com", "-n", NET)
    run("add-client", "alice", "-n", NET)

    code, out, _ = run("config", "alice", "-n", NET)
    assert code == 0
    assert "# WireGuard configuration for alice" in out
    assert "Endpoint = vpn.example.com:51820" in out

    code, out, _ = run("config", "vpn.example.com", "-n", NET)
    assert "AllowedIPs = 10.1.2.2/32" in out


def test_config_to_file(run, tmp_path):
    run("add-network", NET)
    run("add-client", "alice", "-n", NET)
    target = tmp_path / "alice.conf"

    assert run("config", "alice", "-n", NET, "-o", str(target))[0] == 0
    assert "[Interface]" in target.read_text()
    assert stat.S_IMODE(target.stat().st_mode) == 0o600


def test_config_unknown_peer(run):
    run("add-network", NET)
    code, _, err = run("config", "bob", "-n", NET)
    assert code == 1
    assert "bob" in err


def test_qr(run, tmp_path):
    run("add-network", NET)
    run("add-client", "alice", "-n", NET)
    target = tmp_path / "alice.png"

    assert run("qr", "alice", "-n", NET, "-o", str(target))[0] == 0
    assert target.read_bytes().startswith(b"\x89PNG")


def test_unwritable_output_is_an_error(run, tmp_path):
    run("add-network", NET)
    run("add-client", "alice", "-n", NET)
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    code, _, err = run("config", "alice", "-n", NET, "-o", str(blocker / "alice.conf"))
    assert code == 1
    assert err.startswith("Error: ")
