"""End-to-end tests of the ``netdump`` command against a local fake server."""

import json
import socket
import struct

from click.testing import CliRunner

from netdump_client.cli import EXIT_FAILED, EXIT_FATAL, main
from netdump_client.protocol.commands import Command, Status, get_revision
from netdump_client.protocol.framing import build_request

from conftest import response

REV1 = get_revision(1)
OK = response(Status.OK, REV1)
DISC_INFO = b"\x01" + b"RMGE01".ljust(32, b"\x00") + b"SUPER MARIO GALAXY".ljust(512, b"\x00")


def _invoke(server, *args):
    return CliRunner().invoke(main, ["-a", server.host, "-p", str(server.port), *args])


def test_eject_success(one_shot_server):
    server = one_shot_server([OK, OK])

    result = _invoke(server, "eject")
    server.join()

    assert result.exit_code == 0
    assert server.requests == [
        build_request(Command.EJECT_DISC, REV1),
        build_request(Command.DISCONNECT, REV1),
    ]


def test_info_no_disc(one_shot_server):
    server = one_shot_server([response(Status.NO_DISC, REV1), OK])

    result = _invoke(server, "info")
    server.join()

    assert result.exit_code == EXIT_FAILED
    assert "No disc" in result.output
    assert server.requests[-1] == build_request(Command.DISCONNECT, REV1)


def test_info_summary(one_shot_server):
    server = one_shot_server([response(Status.DISC_INFO, REV1, DISC_INFO), OK])

    result = _invoke(server, "info")

    assert result.exit_code == 0
    assert "Disc Type: Wii Single-Sided" in result.output
    assert "Game Name: RMGE01" in result.output
    assert "Internal Name: SUPER MARIO GALAXY" in result.output


def test_info_json_file(one_shot_server, tmp_path):
    out = tmp_path / "info.json"
    server = one_shot_server([response(Status.DISC_INFO, REV1, DISC_INFO), OK])

    result = _invoke(server, "info", "-o", str(out))

    assert result.exit_code == 0
    assert json.loads(out.read_text()) == {
        "disc_type": "WiiSingleSided",
        "game_name": "RMGE01",
        "internal_name": "SUPER MARIO GALAXY",
    }


def test_info_failure_writes_no_json(one_shot_server, tmp_path):
    out = tmp_path / "info.json"
    server = one_shot_server([response(Status.UNKNOWN_DISC_TYPE, REV1), OK])

    result = _invoke(server, "info", "-o", str(out))

    assert result.exit_code == EXIT_FAILED
    assert not out.exists()


def test_game_to_file(one_shot_server, tmp_path):
    out = tmp_path / "game.iso"
    data = bytes(range(256)) * 300
    server = one_shot_server([
        response(Status.GAME, REV1, struct.pack(">Q", len(data)) + data),
        OK,
    ])

    result = _invoke(server, "game", "-o", str(out))

    assert result.exit_code == 0
    assert out.read_bytes() == data


def test_bca_no_disc_creates_no_file(one_shot_server, tmp_path):
    out = tmp_path / "game.bca"
    server = one_shot_server([response(Status.NO_DISC, REV1), OK])

    result = _invoke(server, "bca", "-o", str(out))

    assert result.exit_code == EXIT_FAILED
    assert not out.exists()


def test_shutdown_sends_no_disconnect(one_shot_server):
    server = one_shot_server([OK, OK])

    result = _invoke(server, "shutdown")
    server.join()

    assert result.exit_code == 0
    assert server.requests == [build_request(Command.SHUTDOWN, REV1)]


def test_bad_magic_is_fatal(one_shot_server):
    server = one_shot_server([b"GARBAGE" + b"\x00" * 8])

    result = _invoke(server, "eject")

    assert result.exit_code == EXIT_FATAL
    assert "magic" in result.output


def test_full_not_supported():
    result = CliRunner().invoke(main, ["-a", "127.0.0.1", "full"])
    assert result.exit_code == EXIT_FAILED
    assert "not supported" in result.output


def test_connection_refused():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    result = CliRunner().invoke(main, ["-a", "127.0.0.1", "-p", str(port), "eject"])

    assert result.exit_code == EXIT_FATAL
    assert "Failed to connect" in result.output


def test_host_from_environment(one_shot_server):
    server = one_shot_server([OK, OK])

    result = CliRunner().invoke(
        main,
        ["eject"],
        env={"NETDUMP_HOST": server.host, "NETDUMP_PORT": str(server.port)},
    )

    assert result.exit_code == 0


def test_unknown_protocol_version_rejected():
    result = CliRunner().invoke(main, ["-a", "x", "--protocol-version", "9", "eject"])
    assert result.exit_code == 2


def test_disconnect_sends_single_disconnect(one_shot_server):
    server = one_shot_server([OK, OK])

    result = _invoke(server, "disconnect")
    server.join()

    assert result.exit_code == 0
    assert server.requests == [build_request(Command.DISCONNECT, REV1)]


def test_timeout_must_be_positive():
    """Zero would put the socket in non-blocking mode."""
    for value in ("0", "-1"):
        result = CliRunner().invoke(main, ["-a", "x", "--timeout", value, "eject"])
        assert result.exit_code == 2
        assert "--timeout" in result.output
