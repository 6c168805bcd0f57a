import socket

import pytest

from codexsun.check_port import bind_socket, check_port, is_address_in_use


@pytest.fixture
def occupied_port():
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    yield blocker.getsockname()[1]
    blocker.close()


class TestBindSocket:
    def test_binds_ephemeral_port(self):
        sock = bind_socket("127.0.0.1", 0)
        try:
            host, port = sock.getsockname()[:2]
            assert host == "127.0.0.1"
            assert port > 0
        finally:
            sock.close()

    def test_port_in_use(self, occupied_port):
        with pytest.raises(OSError) as exc_info:
            bind_socket("127.0.0.1", occupied_port)
        assert is_address_in_use(exc_info.value)


class TestCheckPort:
    def test_free_port_exits_0(self, monkeypatch, capsys):
        monkeypatch.setenv("APP_HOST", "127.0.0.1")
        monkeypatch.setenv("APP_PORT", "0")
        with pytest.raises(SystemExit) as exc_info:
            check_port()
        assert exc_info.value.code == 0
        assert "is available" in capsys.readouterr().out

    def test_port_in_use_exits_1(self, monkeypatch, capsys, occupied_port):
        monkeypatch.setenv("APP_HOST", "127.0.0.1")
        monkeypatch.setenv("APP_PORT", str(occupied_port))
        with pytest.raises(SystemExit) as exc_info:
            check_port()
        assert exc_info.value.code == 1
        assert "already in use" in capsys.readouterr().out

    def test_invalid_port_exits_1(self, monkeypatch, capsys):
        monkeypatch.setenv("APP_PORT", "abc")
        with pytest.raises(SystemExit) as exc_info:
            check_port()
        assert exc_info.value.code == 1
        assert "APP_PORT" in capsys.readouterr().out
