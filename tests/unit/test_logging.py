from __future__ import annotations


def test_configure_structlog_warns_on_invalid_log_level(monkeypatch, capfd) -> None:
    from taxlotiq.logging import configure_structlog

    monkeypatch.setenv("TAXLOT_LOG_LEVEL", "not-a-level")
    configure_structlog()

    captured = capfd.readouterr()
    assert "Invalid TAXLOT_LOG_LEVEL" in captured.err
    assert captured.out == ""


def test_configure_structlog_accepts_lowercase_level(monkeypatch, capfd) -> None:
    from taxlotiq.logging import configure_structlog

    monkeypatch.setenv("TAXLOT_LOG_LEVEL", "debug")
    configure_structlog()

    captured = capfd.readouterr()
    assert "Invalid" not in captured.err

    monkeypatch.delenv("TAXLOT_LOG_LEVEL")
    configure_structlog()
