import json
import logging

from zeefax import cli
from zeefax.config import AppConfig, LoggingConfig

from conftest import make_item, make_result


def _restore_handlers(original_handlers):
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)
        handler.close()
    for handler in original_handlers:
        logging.getLogger().addHandler(handler)


def test_configure_logging_defaults_to_console_only():
    original_handlers = list(logging.getLogger().handlers)
    try:
        cli.configure_logging("INFO")

        handlers = logging.getLogger().handlers
        assert any(isinstance(handler, logging.StreamHandler) for handler in handlers)
        assert not any(isinstance(handler, logging.FileHandler) for handler in handlers)
    finally:
        _restore_handlers(original_handlers)


def test_configure_logging_with_log_file_creates_file_handler(tmp_path):
    original_handlers = list(logging.getLogger().handlers)
    try:
        log_path = tmp_path / "nested" / "zeefax.log"
        cli.configure_logging("DEBUG", str(log_path))

        assert log_path.exists()
        handlers = logging.getLogger().handlers
        assert any(isinstance(handler, logging.FileHandler) for handler in handlers)
    finally:
        _restore_handlers(original_handlers)


class StubAggregator:
    def __init__(self, dataset):
        self.dataset = dataset
        self.calls = 0

    async def fetch_all(self):
        self.calls += 1
        return self.dataset


def _patch_pipeline(monkeypatch, categories, dataset):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "load_categories", lambda app_config: categories)
    stub = StubAggregator(dataset)
    monkeypatch.setattr(cli, "build_aggregator", lambda app_config, cats: stub)
    return stub


def test_main_prints_requested_page(monkeypatch, capsys, categories):
    dataset = {"tech": make_result("tech", [make_item("Hello grid", "https://x/1", hours_ago=1)])}
    stub = _patch_pipeline(monkeypatch, categories, dataset)

    exit_code = cli.main(["--page", "110"])

    assert exit_code == 0
    assert stub.calls == 1
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 25
    assert "Hello grid" in lines[3]
    assert lines[-1].startswith("◄100")
    assert lines[-1].endswith("111►")


def test_main_writes_html(monkeypatch, tmp_path, categories):
    _patch_pipeline(monkeypatch, categories, {})
    html_path = tmp_path / "page.html"

    exit_code = cli.main(["--page", "199", "--html", str(html_path)])

    assert exit_code == 0
    assert "ABOUT ZEEFAX" in html_path.read_text(encoding="utf-8")


def test_main_json_dumps_dataset(monkeypatch, capsys, categories):
    _patch_pipeline(monkeypatch, categories, {"tech": make_result("tech", [])})

    exit_code = cli.main(["--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["tech"]["items"] == []


def test_main_cli_overrides_logging(monkeypatch, categories):
    captured = {}

    def fake_configure(level, log_file=None):
        captured["level"] = level
        captured["file"] = log_file

    _patch_pipeline(monkeypatch, categories, {})
    monkeypatch.setattr(cli, "configure_logging", fake_configure)
    monkeypatch.setattr(
        cli,
        "parse_app_config",
        lambda path: AppConfig(logging=LoggingConfig(level="INFO", file="config.log")),
    )

    cli.main(["--config", "configs/test.xml", "--log-level", "DEBUG", "--log-file", "cli.log"])

    assert captured == {"level": "DEBUG", "file": "cli.log"}


def test_main_returns_error_when_pipeline_fails(monkeypatch, categories):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "load_categories", lambda app_config: ())

    assert cli.main(["--page", "100"]) == 1
