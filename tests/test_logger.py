"""Tests for the event logger."""

from glassnav.logger import Logger


def test_bound_logger_merges_context(tmp_path, capsys):
    received = []
    root = Logger(str(tmp_path / "glassnav.log"), callback=lambda msg, data: received.append((msg, data)))
    session_logger = root.bind(session_id="s-1")

    session_logger.log("Glasses battery", {"battery": {"level": 40}})
    root.close()

    out = capsys.readouterr().out
    assert "Glasses battery" in out
    assert '"session_id": "s-1"' in out
    assert received == [("Glasses battery", {"session_id": "s-1", "battery": {"level": 40}})]
    content = (tmp_path / "glassnav.log").read_text(encoding="utf-8")
    assert "glassnav Log" in content
    assert '"level": 40' in content


def test_log_without_data(capsys):
    Logger().log("Server stopped")

    assert capsys.readouterr().out.rstrip().endswith("Server stopped")
