from click.testing import CliRunner

from mdgate import __version__
from mdgate.cli import cli
from mdgate.errors import StartupUnresolvable


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_routes_lists_table(monkeypatch, tmp_path):
    (tmp_path / "mdgate.yaml").write_text("routes:\n  /faq: faq\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["routes"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert any(line.startswith("/ ") and line.endswith("site/readme.md") for line in lines)
    assert any("/silverorb " in line and "site/silverorb/silverorb.md" in line for line in lines)
    assert any(line.endswith("site/faq.md") for line in lines)


def test_routes_rejects_invalid_config(monkeypatch, tmp_path):
    (tmp_path / "mdgate.yaml").write_text("routes:\n  faq: faq\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["routes"])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_serve_passes_options(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    called = {}

    class DummyServer:
        def __init__(self, root, host=None, port=None, overrides=None):
            called["root"] = root
            called["overrides"] = overrides
            self.config = {"owner": "RoyalIcing", "repo": "Orb"}
            self.host = host or "127.0.0.1"
            self.port = port or 8000

        def start(self):
            called["started"] = True

    monkeypatch.setattr("mdgate.server.GatewayServer", DummyServer)
    monkeypatch.setattr("mdgate.cli._configure_logging", lambda level: None)
    result = CliRunner().invoke(
        cli,
        ["serve", "--port", "5050", "--revision", "abc", "--retry-failures"],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert "http://127.0.0.1:5050" in result.output
    assert called["started"] is True
    assert called["overrides"] == {"revision": "abc", "cache_failures": False}


def test_serve_reports_startup_failure(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    class FailingServer:
        def __init__(self, root, host=None, port=None, overrides=None):
            self.config = {"owner": "RoyalIcing", "repo": "Orb"}
            self.host, self.port = "127.0.0.1", 8000

        def start(self):
            raise StartupUnresolvable("RoyalIcing/Orb", "No Git HEAD to be found.")

    monkeypatch.setattr("mdgate.server.GatewayServer", FailingServer)
    monkeypatch.setattr("mdgate.cli._configure_logging", lambda level: None)
    result = CliRunner().invoke(cli, ["serve"])
    assert result.exit_code == 1
    assert "Startup failed" in result.output
    assert "No Git HEAD" in result.output


def test_revision_prints_head(monkeypatch, tmp_path, make_source, sha):
    monkeypatch.chdir(tmp_path)
    source = make_source()
    monkeypatch.setattr("mdgate.server.build_source", lambda config: source)
    result = CliRunner().invoke(cli, ["revision"])
    assert result.exit_code == 0
    assert result.output.strip() == f"{sha} main"
    assert source.closed is True


def test_revision_reports_failure(monkeypatch, tmp_path, make_source):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("mdgate.server.build_source", lambda config: make_source(refs=False))
    result = CliRunner().invoke(cli, ["revision"])
    assert result.exit_code == 1
    assert "Could not resolve revision" in result.output


def test_module_main_entrypoint():
    from mdgate.__main__ import main

    assert callable(main)


def test_serve_rejects_invalid_routes_before_listening(monkeypatch, tmp_path):
    (tmp_path / "mdgate.yaml").write_text("routes:\n  faq: faq\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("mdgate.cli._configure_logging", lambda level: None)
    result = CliRunner().invoke(cli, ["serve"])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "must start with '/'" in result.output
    assert "Serving" not in result.output
    assert isinstance(result.exception, SystemExit)
