"""
Unit tests for the command line interface.
"""

import pytest

from webserver.__main__ import build_parser, config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("WEBSERVER_PORT", "WEBSERVER_ROOT", "WEBSERVER_HOST", "WEBSERVER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestArguments:

    def test_port_is_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
        assert "port" in capsys.readouterr().err

    def test_port_must_be_integer(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["eighty"])

        assert exc_info.value.code == 2

    def test_minimal(self):
        config = config_from_args(build_parser().parse_args(["3000"]))

        assert config.port == 3000
        assert config.document_root == "."
        assert config.reject_oversized is False

    def test_options(self, tmp_path):
        args = build_parser().parse_args([
            "0", "--root", str(tmp_path), "--host", "127.0.0.1",
            "--max-request-size", "2048", "--reject-oversized",
            "--escape-reflected", "--log-format", "json", "-l", "DEBUG",
        ])

        config = config_from_args(args)

        assert config.port == 0
        assert config.document_root == str(tmp_path)
        assert config.host == "127.0.0.1"
        assert config.max_request_size == 2048
        assert config.reject_oversized is True
        assert config.escape_reflected is True
        assert config.log_format == "json"
        assert config.log_level == "DEBUG"

    def test_command_line_overrides_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("WEBSERVER_ROOT", "/srv/www")
        monkeypatch.setenv("WEBSERVER_HOST", "10.0.0.1")

        config = config_from_args(build_parser().parse_args(["80", "--root", str(tmp_path)]))

        assert config.document_root == str(tmp_path)
        assert config.host == "10.0.0.1"


class TestMain:

    def test_invalid_document_root(self, tmp_path, capsys):
        assert main(["8080", "--root", str(tmp_path / "missing")]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_invalid_port(self, capsys):
        assert main(["70000"]) == 1
        assert "Invalid port" in capsys.readouterr().err

    def test_bind_failure(self, monkeypatch, tmp_path, capsys):
        from webserver import server

        def refuse(self, setup_logging=True):
            raise OSError(98, "Address already in use")

        monkeypatch.setattr(server.WebServer, "run", refuse)

        assert main(["8080", "--root", str(tmp_path)]) == 1
        assert "could not start server" in capsys.readouterr().err
