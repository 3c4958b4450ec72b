"""Tests for the restgate command-line interface."""

import io
import json
import socket
from pathlib import Path

import httpx
import pytest

from restgate.cli import main
from restgate.cli.arg_parser import build_parser, parse_args
from restgate.cli.send import cmd_send
from restgate.cli.serve import run_serve


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"server": {"port": 9001}}), encoding="utf-8")
    return path


@pytest.fixture
def posted(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    """Capture requests made by RestClient and answer 200 OK."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="OK")

    transport = httpx.MockTransport(handler)
    original_init = httpx.AsyncClient.__init__

    def patched_init(self, *args, **kwargs):
        kwargs["transport"] = transport
        original_init(self, *args, **kwargs)

    monkeypatch.setattr(httpx.AsyncClient, "__init__", patched_init)
    return requests


class TestArgParser:
    """Tests for build_parser / parse_args."""

    def test_serve_defaults(self) -> None:
        args = parse_args(["serve"])

        assert args.command == "serve"
        assert args.port is None
        assert args.host is None
        assert args.config is None
        assert args.verbose is False
        assert args.log_dir is None

    def test_serve_options(self) -> None:
        args = parse_args(["serve", "-p", "9000", "--host", "::1", "-v", "--log-dir", "/tmp/x"])

        assert args.port == 9000
        assert args.host == "::1"
        assert args.verbose is True
        assert args.log_dir == Path("/tmp/x")

    def test_send_options(self) -> None:
        args = parse_args(["send", '{"a":1}', "-u", "alice", "--password", "pw", "--timeout", "2.5"])

        assert args.command == "send"
        assert args.body == '{"a":1}'
        assert args.username == "alice"
        assert args.password == "pw"
        assert args.timeout == 2.5

    def test_send_requires_body(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["send"])

    def test_invalid_port_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["serve", "--port", "eighty"])


class TestMain:
    """Tests for main() dispatch."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "serve" in capsys.readouterr().out

    def test_dispatches_serve(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict] = []

        async def fake_run_serve(**kwargs) -> int:
            calls.append(kwargs)
            return 0

        monkeypatch.setattr("restgate.cli.serve.run_serve", fake_run_serve)

        with pytest.raises(SystemExit) as exc_info:
            main(["serve", "--port", "9002"])

        assert exc_info.value.code == 0
        assert calls[0]["port"] == 9002

    def test_keyboard_interrupt_exits_cleanly(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def interrupted(**kwargs) -> int:
            raise KeyboardInterrupt

        monkeypatch.setattr("restgate.cli.serve.run_serve", interrupted)

        with pytest.raises(SystemExit) as exc_info:
            main(["serve"])

        assert exc_info.value.code == 0

    def test_send_exit_code_propagates(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def failing_send(body, **kwargs) -> int:
            return 1

        monkeypatch.setattr("restgate.cli.send.cmd_send", failing_send)

        with pytest.raises(SystemExit) as exc_info:
            main(["send", "x"])

        assert exc_info.value.code == 1


class TestCmdSend:
    """Tests for the send subcommand."""

    async def test_posts_with_resolved_credentials(
        self, config_file: Path, posted: list[httpx.Request], capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = await cmd_send('{"a":1}', config_path=config_file)

        assert exit_code == 0
        assert len(posted) == 1
        assert str(posted[0].url) == "http://127.0.0.1:9001/"
        assert posted[0].headers["Authorization"] == "Basic VGVzdFVzZXJuYW1lOlRlc3RQYXNzd29yZA=="
        assert posted[0].content == b'{"a":1}'
        assert "200" in capsys.readouterr().out

    async def test_env_credentials(
        self, config_file: Path, posted: list[httpx.Request], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RESTGATE_USERNAME", "a")
        monkeypatch.setenv("RESTGATE_PASSWORD", "b")

        await cmd_send("x", config_path=config_file)

        assert posted[0].headers["Authorization"] == "Basic YTpi"

    async def test_overrides(self, config_file: Path, posted: list[httpx.Request]) -> None:
        await cmd_send("x", port=9100, host="localhost", username="a", password="b",
                       config_path=config_file)

        assert str(posted[0].url) == "http://localhost:9100/"
        assert posted[0].headers["Authorization"] == "Basic YTpi"

    async def test_reads_stdin(
        self, config_file: Path, posted: list[httpx.Request], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('{"from":"stdin"}'))

        await cmd_send("-", config_path=config_file)

        assert posted[0].content == b'{"from":"stdin"}'

    async def test_non_2xx_exit_code(
        self, config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(401, text="Unauthorized"))
        original_init = httpx.AsyncClient.__init__

        def patched_init(self, *args, **kwargs):
            kwargs["transport"] = transport
            original_init(self, *args, **kwargs)

        monkeypatch.setattr(httpx.AsyncClient, "__init__", patched_init)

        assert await cmd_send("x", config_path=config_file) == 1

    async def test_config_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        exit_code = await cmd_send("x", config_path=tmp_path / "missing.json")

        assert exit_code == 1
        assert "Configuration error" in capsys.readouterr().out


class TestRunServe:
    """Failure paths of the serve subcommand."""

    @pytest.fixture(autouse=True)
    def _leave_stdio_alone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("restgate.cli.serve.configure_stdio", lambda: None)

    async def test_config_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{", encoding="utf-8")

        assert await run_serve(config_path=bad) == 1
        assert "Configuration error" in capsys.readouterr().out

    async def test_port_in_use(
        self, config_file: Path, restgate_logger, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            exit_code = await run_serve(port=port, config_path=config_file)

        assert exit_code == 1
        assert "Cannot bind" in capsys.readouterr().out
