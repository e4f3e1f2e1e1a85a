import logging

from merkle_api.logutil import RedactingFilter, setup_logging


def _render(msg, *args) -> str:
    record = logging.LogRecord("merkle_api", logging.INFO, __file__, 1, msg, args, None)
    assert RedactingFilter().filter(record)
    return record.getMessage()


def test_key_material_is_masked():
    assert _render("loaded key=%s", "c2VjcmV0LXNpZ25pbmc=") == "loaded key=***"
    assert _render("secret=abc sk_b64=def") == "secret=*** sk_b64=***"
    assert _render("private_key=00ff") == "private_key=***"


def test_ordinary_words_untouched():
    assert _render("task=%s disk=%s", "build", "ok") == "task=build disk=ok"
    assert _render("root=%s", "ab" * 32) == "root=" + "ab" * 32


def test_setup_logging_installs_filter():
    setup_logging("debug", loggers=("merkle_api.test",))
    lg = logging.getLogger("merkle_api.test")
    assert lg.level == logging.DEBUG
    assert any(isinstance(f, RedactingFilter) for f in lg.filters)
