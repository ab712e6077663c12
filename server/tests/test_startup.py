import logging
import socket

import pytest

import main


@pytest.fixture
def bind_target(monkeypatch):
    monkeypatch.delenv("WERKZEUG_RUN_MAIN", raising=False)
    monkeypatch.setattr(main, "BIND_ADDRESS", "127.0.0.1")

    def port(number):
        monkeypatch.setattr(main, "PORT", number)

    return port


def test_main_exits_when_port_is_taken(bind_target, monkeypatch, caplog):
    def run(*args, **kwargs):
        pytest.fail("server started on an occupied port")

    monkeypatch.setattr(main.app, "run", run)

    with socket.create_server(("127.0.0.1", 0)) as held:
        bind_target(held.getsockname()[1])
        with caplog.at_level(logging.INFO), pytest.raises(SystemExit) as exc:
            main.main()

    assert exc.value.code == 1
    assert any(r.levelno == logging.CRITICAL and "Could not bind" in r.getMessage() for r in caplog.records)


def test_main_starts_server_on_free_port(bind_target, monkeypatch):
    with socket.create_server(("127.0.0.1", 0)) as spare:
        free_port = spare.getsockname()[1]
    bind_target(free_port)

    calls = []
    monkeypatch.setattr(main.app, "run", lambda **kwargs: calls.append(kwargs))
    main.main()

    assert calls == [{"host": "127.0.0.1", "port": free_port, "debug": main.DEBUG}]
