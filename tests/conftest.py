import logging
import subprocess

import pytest


class FakeRunner:
    """
    Stands in for ``subprocess.run``.

    Args:
        results (dict): maps the first words of a command to a
            (returncode, stdout) tuple or a callable returning one.
    """

    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []
        self.envs = []

    def _lookup(self, args):
        for size in range(len(args), 0, -1):
            key = " ".join(args[:size])
            if key in self.results:
                return self.results[key]
        return (0, "")

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        self.envs.append(kwargs.get("env"))
        result = self._lookup(args)
        if callable(result):
            result = result(args)
        returncode, stdout = result
        return subprocess.CompletedProcess(args, returncode, stdout, "")

    @property
    def commands(self):
        return [" ".join(call) for call in self.calls]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture(autouse=True)
def no_file_logging():
    yield
    parent = logging.getLogger("kubeboot")
    for handler in list(parent.handlers):
        if isinstance(handler, logging.FileHandler):
            parent.removeHandler(handler)
            handler.close()
