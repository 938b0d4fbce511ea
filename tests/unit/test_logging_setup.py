import json
import logging
import os
import time

from nanobanana.logging_setup import LogConfig, SizeRotatingFileHandler, setup_logging


def test_text_format_on_stderr(capsys):
    logger = setup_logging(LogConfig(level="info"))
    logger.info("hello")
    logger.debug("hidden")
    err = capsys.readouterr().err
    assert "[INF] hello" in err
    assert "hidden" not in err
    assert err.startswith("[")


def test_error_level_hides_info(capsys):
    logger = setup_logging(LogConfig(level="error"))
    logger.info("quiet")
    logger.error("boom")
    err = capsys.readouterr().err
    assert "quiet" not in err
    assert "[ERR] boom" in err


def test_json_format(capsys):
    logger = setup_logging(LogConfig(level="debug", json=True, prog="nb"))
    logging.getLogger("nanobanana.extractors").debug('with "quotes"')
    line = capsys.readouterr().err.strip().splitlines()[-1]
    rec = json.loads(line)
    assert rec["level"] == "debug"
    assert rec["msg"] == 'with "quotes"'
    assert rec["prog"] == "nb"
    assert rec["pid"] == os.getpid()
    assert rec["ts"].endswith("Z")


def test_file_duplicates_stderr(tmp_path, capsys):
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging(LogConfig(file=str(log_file)))
    logger.info("to both")
    assert "to both" in capsys.readouterr().err
    assert "[INF] to both" in log_file.read_text()


def test_rotation_keeps_newest(tmp_path):
    path = tmp_path / "app.log"
    handler = SizeRotatingFileHandler(str(path), max_bytes=10, keep=2)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger("nanobanana.test_rotation")
    logger.propagate = False
    logger.addHandler(handler)
    try:
        for i in range(5):
            logger.warning("message number %d", i)
            # distinct mtimes for ordering
            time.sleep(0.01)
    finally:
        logger.removeHandler(handler)
        handler.close()
    rotated = sorted(p.name for p in tmp_path.iterdir() if p.name.startswith("app.log."))
    assert len(rotated) == 2
    assert path.read_text() == "message number 4\n"


def test_rotation_disabled_by_default(tmp_path):
    path = tmp_path / "app.log"
    handler = SizeRotatingFileHandler(str(path))
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "m" * 100, None, None)
    handler.emit(record)
    handler.emit(record)
    handler.close()
    assert [p.name for p in tmp_path.iterdir()] == ["app.log"]
