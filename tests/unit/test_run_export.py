"""Unit tests for the run_export CLI helpers."""

from __future__ import annotations

import pytest

from hitexport.notifiers import LogNotifier, WebhookNotifier
from hitexport.sources import HTTPHitSource, SQLiteHitSource
from scripts import run_export


def _parse(*argv):
    return run_export.build_arg_parser().parse_args(
        ["--tenant-id", "3", "--tenant-code", "example", *argv]
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("EXPORT_SOURCE_URL", "EXPORT_API_TOKEN", "EXPORT_WEBHOOK_URL", "EXPORT_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestArgsToConfig:
    def test_flags_override_defaults(self, tmp_path):
        args = _parse(
            "--page-size", "250",
            "--pacing-delay", "0",
            "--export-dir", str(tmp_path),
            "--webhook-url", "https://hooks.example.com/x",
        )

        config = run_export.args_to_config(args)

        assert config.page_size == 250
        assert config.pacing_delay == 0.0
        assert config.export_dir == str(tmp_path)
        assert config.webhook_url == "https://hooks.example.com/x"

    def test_source_flags_are_exclusive(self):
        with pytest.raises(SystemExit):
            _parse("--source-url", "https://x.example/hits", "--sqlite-db", "hits.sqlite3")


class TestBuilders:
    def test_sqlite_source_filters_by_tenant(self):
        args = _parse("--sqlite-db", "hits.sqlite3")
        source = run_export.build_source(args, run_export.args_to_config(args))
        assert isinstance(source, SQLiteHitSource)
        assert source.site_id == 3

    def test_http_source(self):
        args = _parse("--source-url", "https://x.example/hits", "--api-token", "t")
        source = run_export.build_source(args, run_export.args_to_config(args))
        assert isinstance(source, HTTPHitSource)
        source.close()

    def test_missing_source_exits(self):
        args = _parse()
        with pytest.raises(SystemExit):
            run_export.build_source(args, run_export.args_to_config(args))

    def test_notifier_selection(self):
        assert isinstance(run_export.build_notifier(run_export.args_to_config(_parse())), LogNotifier)
        config = run_export.args_to_config(_parse("--webhook-url", "https://hooks.example.com/x"))
        assert isinstance(run_export.build_notifier(config), WebhookNotifier)
