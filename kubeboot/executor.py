"""
executor
========

Run external commands (apt, kubeadm, kubectl, systemctl ...) with
uniform logging and fail-fast behaviour.

Every command is logged before it runs. A command which exits non-zero
raises :class:`CommandFailed` unless the caller passed ``fail_ok=True``,
in which case the :class:`ExecutionResult` is returned for inspection.
The flags are keyword arguments of a single call, they never stick to
the executor.
"""
import os
import subprocess as sp
from collections import namedtuple

from kubeboot.util.logger import Logger

LOGGER = Logger(__name__)

class ExecutionResult(namedtuple("ExecutionResult",
                                 ["args", "returncode", "output"])):
    """
    The outcome of one command.

    ``output`` is the captured standard output, or None when the output
    was not asked for.
    """
    __slots__ = ()

    @property
    def ok(self):  # pylint: disable=invalid-name
        """True if the command exited with 0"""
        return self.returncode == 0


class CommandFailed(RuntimeError):
    """A command exited non-zero and was not allowed to"""

    def __init__(self, result):
        self.result = result
        super().__init__("'%s' exited with %s" % (" ".join(result.args),
                                                   result.returncode))


class Executor:
    """
    Execute commands given as argument lists.

    Args:
        debug (bool): log the output of commands which are not captured.
            Otherwise it is discarded.
        env (dict): extra environment variables for every command,
            e.g. ``KUBECONFIG``.
        runner: a callable compatible with ``subprocess.run``
    """

    def __init__(self, debug=True, env=None, runner=sp.run):
        self.debug = debug
        self.env = dict(env or {})
        self.runner = runner

    def setenv(self, key, value):
        """export ``key`` to all following commands"""
        LOGGER.info("### export %s=%s", key, value)
        self.env[key] = value

    def _environ(self, extra):
        environ = dict(os.environ)
        environ.update(self.env)
        if extra:
            environ.update(extra)
        return environ

    def run(self, args, capture=False, fail_ok=False, env=None,
            input=None):  # pylint: disable=redefined-builtin
        """
        Run a single command.

        Args:
            args (list): the command and its arguments, not a shell string.
            capture (bool): return stdout in ``ExecutionResult.output``
                (it is logged, too).
            fail_ok (bool): return a failed result instead of raising.
            env (dict): environment variables only for this command.
            input (str): text fed to the command's stdin.

        Returns:
            ExecutionResult

        Raises:
            CommandFailed if the command exits non-zero and ``fail_ok``
            is False.
        """
        args = [str(arg) for arg in args]
        LOGGER.info("### %s", " ".join(args))

        try:
            proc = self.runner(args,
                               input=input,
                               encoding="utf-8",
                               stdout=sp.PIPE,
                               stderr=sp.PIPE,
                               env=self._environ(env))
        except OSError as exc:
            # e.g. the binary is missing, treat it like a failing command
            LOGGER.error("%s: %s", args[0], exc)
            result = ExecutionResult(args, 127, None)
        else:
            output = proc.stdout if capture else None
            if capture:
                LOGGER.info("%s", proc.stdout.rstrip("\n"), color=False)
            elif self.debug and proc.stdout:
                LOGGER.info("%s", proc.stdout.rstrip("\n"), color=False)
            if self.debug and proc.stderr:
                LOGGER.info("%s", proc.stderr.rstrip("\n"), color=False)
            result = ExecutionResult(args, proc.returncode, output)

        if not result.ok and not fail_ok:
            LOGGER.error("### cmd failed. exit")
            raise CommandFailed(result)

        return result

    def output(self, args, **kwargs):
        """Run ``args`` and return the captured standard output."""
        return self.run(args, capture=True, **kwargs).output
