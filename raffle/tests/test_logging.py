import io
import json
import logging

from raffle import logging as rlog


def _capture(fmt):
    buf = io.StringIO()
    logger = logging.getLogger("raffle.test.capture")
    logger.handlers[:] = []
    handler = logging.StreamHandler(buf)
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, buf


def test_json_formatter_merges_context_and_extras():
    logger, buf = _capture(rlog.JSONFormatter())
    with rlog.trace_scope("t-1"):
        rlog.bind(component="keeper")
        logger.info("upkeep performed", extra={"request_id": 3, "raffle": b"\x01\x02"})

    rec = json.loads(buf.getvalue())
    assert rec["msg"] == "upkeep performed"
    assert rec["level"] == "INFO"
    assert rec["trace_id"] == "t-1"
    assert rec["component"] == "keeper"
    assert rec["request_id"] == 3
    assert rec["raffle"] == "0x0102"
    assert "component" not in rlog.context()


def test_text_formatter_one_line():
    logger, buf = _capture(rlog.TextFormatter())
    logger.warning("value transfer rejected", extra={"amount": 5})
    line = buf.getvalue().strip()
    assert " | WARNING | raffle.test.capture | value transfer rejected amount=5" in line
    assert "\n" not in line


def test_with_fields_adapter():
    logger, buf = _capture(rlog.JSONFormatter())
    rlog.with_fields(logger, chain_id=31337).info("hello", extra={"height": 2})
    rec = json.loads(buf.getvalue())
    assert (rec["chain_id"], rec["height"]) == (31337, 2)


def test_configure_honours_env(monkeypatch):
    monkeypatch.setenv("RAFFLE_LOG_FORMAT", "json")
    monkeypatch.setenv("RAFFLE_LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    buf = io.StringIO()
    try:
        rlog.configure(stream=buf)
        assert root.level == logging.DEBUG
        logging.getLogger("raffle.x").debug("configured")
        assert json.loads(buf.getvalue().splitlines()[-1])["msg"] == "configured"
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        root.setLevel(saved[0])
        for h in saved[1]:
            root.addHandler(h)
