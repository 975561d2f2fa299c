import logging

from logging_config import LOOP_LOGGER, configure_logging, load_logging_config


def _write_pyproject(tmp_path, body):
    path = tmp_path / "pyproject.toml"
    path.write_text(body)
    return str(path)


def test_levels_are_read_from_pyproject(tmp_path):
    path = _write_pyproject(
        tmp_path,
        '[tool.onnx2graph.logging]\ndefault_level = "WARNING"\n'
        '[tool.onnx2graph.logging.levels]\n"onnx2graph.testing.a" = "error"\n',
    )
    assert load_logging_config(path)["default_level"] == "WARNING"

    applied = configure_logging(path, loop_debug=False)

    assert applied == {"onnx2graph.testing.a": logging.ERROR}
    assert logging.getLogger("onnx2graph.testing.a").level == logging.ERROR
    configure_logging()


def test_missing_file_gives_empty_config(tmp_path):
    assert load_logging_config(str(tmp_path / "absent.toml")) == {}


def test_loop_debug_flag_lowers_the_loop_logger(tmp_path, monkeypatch):
    path = _write_pyproject(tmp_path, "")
    monkeypatch.setenv("ONNX2GRAPH_LOOP_DEBUG", "1")

    applied = configure_logging(path)

    assert applied[LOOP_LOGGER] == logging.DEBUG
    assert logging.getLogger(LOOP_LOGGER).level == logging.DEBUG
    monkeypatch.delenv("ONNX2GRAPH_LOOP_DEBUG")
    configure_logging()


def test_reconfiguring_keeps_a_single_console_handler():
    configure_logging()
    configure_logging()
    names = [h.get_name() for h in logging.getLogger().handlers]
    assert names.count("onnx2graph-console") == 1


def test_loop_debug_dumps_rebuilt_body(tmp_path, monkeypatch, caplog):
    from onnx2graph import import_onnx
    from onnx2graph.testing import make_counter_loop_model

    monkeypatch.delenv("ONNX2GRAPH_LOOP_DEBUG", raising=False)
    configure_logging(_write_pyproject(tmp_path, ""), loop_debug=True)
    try:
        with caplog.at_level(logging.DEBUG, logger=LOOP_LOGGER):
            import_onnx(make_counter_loop_model())
    finally:
        configure_logging()

    dumps = [r.getMessage() for r in caplog.records if r.name == LOOP_LOGGER]
    assert any(msg.startswith("Loop 'loop' body:") for msg in dumps)
    assert any("i_in" in msg for msg in dumps)
