import json

import pytest

from newsignal import main as cli
from newsignal.models import RawArticle
from newsignal.pipeline import ingestion

CONFIG = """
sources:
  - name: Wire
    url: https://wire.example/rss
    type: rss
  - name: Down
    url: https://down.example/api
    type: http
"""


def stub_adapter(source, *, timeout=None):
    if source.name == "Down":
        raise ConnectionError("down.example unreachable")
    return [RawArticle(title="Exchange X halts withdrawals", summary="", url="https://wire.example/1", source="")]


@pytest.fixture(autouse=True)
def offline(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BRIEFING_AI_BACKEND", "none")
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(ingestion, "DEFAULT_ADAPTERS", {"rss": stub_adapter, "http": stub_adapter})


def write_config(tmp_path, text):
    path = tmp_path / "sources.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_once_prints_report_and_flags_failed_source(tmp_path, capsys):
    code = cli.main(["--once", "--config", write_config(tmp_path, CONFIG)])

    report = json.loads(capsys.readouterr().out)
    assert code == 2
    assert report["succeeded"] == 1
    assert report["failed"] == 1
    assert report["inserted"] == 1
    by_source = {s["source"]: s for s in report["sources"]}
    assert by_source["Down"]["error"].startswith("ConnectionError")
    assert by_source["Wire"]["inserted"] == 1


def test_once_exits_zero_when_every_source_succeeds(tmp_path, capsys):
    config = CONFIG.split("  - name: Down")[0]
    code = cli.main(["--once", "--config", write_config(tmp_path, config)])

    assert code == 0
    assert json.loads(capsys.readouterr().out)["failed"] == 0


@pytest.mark.parametrize("text", [None, "sources:\n  - name: Broken\n    url: ftp://x\n    type: rss\n"])
def test_config_error_exits_one(tmp_path, capsys, text):
    path = write_config(tmp_path, text) if text is not None else str(tmp_path / "missing.yaml")
    assert cli.main(["--once", "--config", path]) == 1
    assert capsys.readouterr().out == ""
