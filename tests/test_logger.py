import logging

import pytest

from kubeboot.util.logger import (Logger, LOG_LEVELS, DEFAULT_LOG_LEVEL,
                                  console_handlers, log_to_file)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    Logger.LOG_LEVEL = DEFAULT_LOG_LEVEL
    Logger("kubeboot.tests")


def test_logger_default_state():
    assert Logger.LOG_LEVEL == DEFAULT_LOG_LEVEL


def test_logger_creation():
    for i in LOG_LEVELS:
        Logger.LOG_LEVEL = i
        log = Logger("kubeboot.tests")
        assert log is not None
        assert log.LOG_LEVEL == i


def test_logger_fail():
    for i in [-1, 100, 23, 42]:
        Logger.LOG_LEVEL = i
        assert Logger.LOG_LEVEL == i

        with pytest.raises(ValueError):
            Logger("kubeboot.tests")


def test_level_by_name():
    log = Logger("kubeboot.tests")
    log.level = "debug"
    assert log.level == 10
    log.level = "2"
    assert log.level == 30
    log.level = "quiet"
    assert log.level == 0


def test_singleton():
    assert id(Logger("kubeboot.a")) == id(Logger("kubeboot.b"))


def test_log_file(tmp_path):
    path = tmp_path / "h0.setup.log"
    path.write_text("previous run\n")

    log_to_file(str(path))
    log = Logger("kubeboot.tests")
    log.info("### kubeadm init --v=%d", 5)
    log.error("### cmd failed. exit")
    log.success("k8s setup finished")
    log.debug("not on info level")

    content = path.read_text()
    assert "previous run" not in content
    assert "### kubeadm init --v=5" in content
    assert "[-] ### cmd failed. exit" in content
    assert "[+] k8s setup finished" in content
    assert "not on info level" not in content
    assert "\x1b[" not in content


def test_log_file_ignores_verbosity(tmp_path):
    path = tmp_path / "h1.setup.log"
    log_to_file(str(path))

    log = Logger("kubeboot.tests")
    log.level = "error"
    log.info("### kubeadm join 10.0.0.1:6443 --v=5")
    log.level = "quiet"
    log.error("### cmd failed. exit")

    content = path.read_text()
    assert "### kubeadm join 10.0.0.1:6443 --v=5" in content
    assert "### cmd failed. exit" in content
    assert log.level == 0


def test_verbosity_applies_to_all_modules():
    first = Logger("kubeboot.executor").logger
    second = Logger("kubeboot.handoff").logger
    Logger("kubeboot.tests").level = "warning"

    handlers = console_handlers(first)
    assert handlers == console_handlers(second)
    assert [h.level for h in handlers] == [logging.WARNING]
    assert first.isEnabledFor(logging.INFO)


def test_log_file_is_replaced(tmp_path):
    first, second = tmp_path / "first.log", tmp_path / "second.log"
    log_to_file(str(first))
    log_to_file(str(second))

    Logger("kubeboot.tests").info("only in the second file")

    assert "only in the second" not in first.read_text()
    assert "only in the second" in second.read_text()


# Run tests with -s to verify the output:
# py.test -s tests/test_logger.py
def test_level_logging():
    for i in LOG_LEVELS:
        Logger.LOG_LEVEL = i
        log = Logger("kubeboot.tests")

        msg = "waiting for nodeJoinFile"
        msg2 = "-123.00"

        log.error(msg)
        log.error("%s: %s", msg, msg2, color=False)
        log.warning(msg)
        log.warn("%s: %s", msg, msg2, color=False)
        log.info(msg)
        log.info("%s: %s", msg, msg2, color=False)
        log.debug(msg)
        log.debug("%s: %s", msg, msg2, color=False)
        log.question(msg)
        log.success("%s: %s", msg, msg2)
        print()
