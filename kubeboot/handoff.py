"""
handoff
=======

The master publishes the output of ``kubeadm init`` in a file on a shared
file system. Workers wait for this file and take the ``kubeadm join``
command from its end.

Some shared file systems are slow to notice new files on other hosts.
Listing the parent directory before checking for the file makes them
re-read it, so both the writer and the watcher do that.
"""
import os
import re
import tempfile
import time
from enum import Enum

from kubeboot.util.logger import Logger
from kubeboot.util.util import wait_for, WaitTimeout

LOGGER = Logger(__name__)

CONTINUATION = "\\"


class JoinTimeout(WaitTimeout):
    """The join file did not show up within the configured timeout"""


class JoinCommandNotFound(ValueError):
    """The join file does not contain a usable join command"""


class JoinFile:
    """
    The hand-off file between master and workers.

    Only the master writes it, exactly once per ``kubeadm init``. Workers
    only read it.

    Args:
        path (str): the location on the shared file system
    """

    def __init__(self, path):
        self.path = path
        self.directory = os.path.dirname(os.path.abspath(path))

    def __repr__(self):
        return f"JoinFile({self.path!r})"

    def exists(self):
        """check for the file without refreshing the directory"""
        return os.path.isfile(self.path)

    def refresh(self):
        """
        list the parent directory to get rid of stale metadata

        A failing listing, e.g. while the share is not mounted yet or
        ESTALE on NFS, is no reason to stop waiting.
        """
        try:
            os.listdir(self.directory)
        except OSError as exc:
            LOGGER.debug("can't list %s: %s", self.directory, exc)

    def remove(self):
        """
        delete the file if present

        Returns:
            True if a file was deleted
        """
        try:
            os.remove(self.path)
        except FileNotFoundError:
            return False
        LOGGER.debug("Removed stale join file %s", self.path)
        return True

    def read(self):
        """return the content of the file"""
        with open(self.path, "r") as fh:
            return fh.read()

    def publish(self, text):
        """
        Write ``text`` so that readers never see a partial file.

        The content goes to a temporary file in the same directory, which
        is then renamed over ``path``.
        """
        fd, tmp = tempfile.mkstemp(prefix=".%s." % os.path.basename(self.path),
                                   dir=self.directory)
        try:
            with os.fdopen(fd, "w") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp, 0o644)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

        self._sync_directory()
        self.refresh()
        LOGGER.info("Join information written to %s", self.path)

    def _sync_directory(self):
        try:
            dirfd = os.open(self.directory, os.O_RDONLY)
        except OSError as exc:
            LOGGER.debug("Can't open %s for fsync: %s", self.directory, exc)
            return
        try:
            os.fsync(dirfd)
        except OSError as exc:
            # not supported on every file system
            LOGGER.debug("fsync of %s failed: %s", self.directory, exc)
        finally:
            os.close(dirfd)


class WatchState(Enum):
    """states of :class:`JoinFileWatcher`"""
    WAITING = "waiting"
    FOUND = "found"
    TIMED_OUT = "timed-out"


class JoinFileWatcher:
    """
    Poll for the join file until the master has written it.

    Every ``interval`` seconds the watcher lists the parent directory and
    checks for the file. Without a ``timeout`` it waits forever.

    Args:
        join_file (JoinFile): the file to wait for
        interval (int): seconds between two checks
        timeout (int): optional upper limit in seconds
        sleep: the sleep function
    """

    def __init__(self, join_file, interval=5, timeout=None, sleep=time.sleep):
        self.join_file = join_file
        self.interval = interval
        self.timeout = timeout
        self.sleep = sleep
        self.state = WatchState.WAITING
        self.elapsed = 0

    def _progress(self, elapsed):
        self.elapsed = elapsed
        LOGGER.info("have waited %d seconds", elapsed)

    def wait(self):
        """
        Block until the join file exists.

        Returns:
            the seconds waited

        Raises:
            JoinTimeout if a timeout was configured and has passed.
        """
        LOGGER.info("wait to join the master")
        try:
            self.elapsed = wait_for(self.join_file.exists,
                                    self.interval,
                                    timeout=self.timeout,
                                    refresh=self.join_file.refresh,
                                    progress=self._progress,
                                    sleep=self.sleep)
        except WaitTimeout as exc:
            self.state = WatchState.TIMED_OUT
            raise JoinTimeout(f"{self.join_file.path} not found: {exc}")

        self.state = WatchState.FOUND
        LOGGER.success("Found %s after %d seconds", self.join_file.path,
                       self.elapsed)
        return self.elapsed


def _non_empty_lines(text):
    return [line for line in (text or "").splitlines() if line.strip()]


def _join_lines(lines):
    """drop the continuation marker of each line and join with a space"""
    parts = []
    for line in lines:
        line = line.lstrip().rstrip("\n")
        stripped = line.rstrip()
        if stripped.endswith(CONTINUATION):
            line = stripped[:-1]
        parts.append(line)
    return " ".join(parts).strip()


class LastTwoLinesParser:
    """
    kubeadm prints the join command as the last two lines of its output,
    the first one ending with a backslash.

    This breaks as soon as kubeadm changes its output format.
    """
    name = "last-two-lines"

    def __call__(self, text):
        lines = _non_empty_lines(text)
        if len(lines) < 2:
            raise JoinCommandNotFound("expected at least two lines of "
                                      "kubeadm output, got %d" % len(lines))
        return _join_lines(lines[-2:])


class JoinPatternParser:
    """
    Search for the last line starting with ``kubeadm join`` and follow
    its continuation lines.
    """
    name = "pattern"
    start = re.compile(r"^\s*kubeadm\s+join\s")

    def __call__(self, text):
        lines = _non_empty_lines(text)
        starts = [idx for idx, line in enumerate(lines)
                  if self.start.match(line)]
        if not starts:
            raise JoinCommandNotFound("no 'kubeadm join' found")

        idx = starts[-1]
        command = [lines[idx]]
        while command[-1].rstrip().endswith(CONTINUATION) and \
                idx + 1 < len(lines):
            idx += 1
            command.append(lines[idx])
        return _join_lines(command)


PARSERS = {parser.name: parser for parser in
           (LastTwoLinesParser, JoinPatternParser)}


def get_parser(name):
    """return a join command parser instance by name"""
    try:
        return PARSERS[name]()
    except KeyError:
        raise ValueError("unknown join parser '%s', choose one of: %s" % (
            name, ", ".join(sorted(PARSERS))))


def extract_join_command(text, parser=None):
    """
    Recover the join command from the captured ``kubeadm init`` output.

    Args:
        text (str): the content of the join file
        parser: a callable taking the text, defaults to
            :class:`LastTwoLinesParser`

    Returns:
        the join command as a single line

    Raises:
        JoinCommandNotFound
    """
    parser = parser or LastTwoLinesParser()
    return parser(text)
