"""
General purpose utilities
"""
import os
import pwd
import socket
import sys
import time


class WaitTimeout(RuntimeError):
    """A condition did not become true in time"""


def wait_for(condition, interval, timeout=None, refresh=None,
             progress=None, sleep=time.sleep):
    """
    Block until ``condition()`` is true.

    Each round sleeps ``interval`` seconds first, reports the accumulated
    time to ``progress``, calls ``refresh`` and then checks the condition.
    Without a timeout this only returns once the condition is met.

    Args:
        condition: callable returning a truthy value when done.
        interval (int): Seconds to sleep between checks.
        timeout (int): Give up after this many seconds, None waits forever.
        refresh: Optional callable run before every check, e.g. to force
            a shared file system to re-read a directory.
        progress: Optional callable receiving the elapsed seconds.
        sleep: The sleep function.

    Returns:
        The elapsed number of seconds.

    Raises:
        WaitTimeout if ``timeout`` elapsed.
    """
    elapsed = 0
    while True:
        sleep(interval)
        elapsed += interval
        if progress:
            progress(elapsed)
        if refresh:
            refresh()
        if condition():
            return elapsed
        if timeout is not None and elapsed >= timeout:
            raise WaitTimeout(f"gave up after {elapsed} seconds")


def short_hostname(hostname=None):
    """
    return the host name up to the first dot, like ``hostname -s``
    """
    hostname = hostname or socket.gethostname()
    return hostname.split(".")[0]


def ensure_root(argv=None, execvp=os.execvp):
    """
    Re-run the current command with sudo if we are not root.

    On success the current process is replaced, so this only returns
    when already running as root.
    """
    if os.geteuid() == 0:
        return

    argv = list(argv or sys.argv)
    execvp("sudo", ["sudo"] + argv)


def invoking_user(environ=None):
    """
    Find the user who called sudo.

    Returns:
        A tuple (uid, gid) or None if SUDO_USER is not set or unknown.
    """
    environ = os.environ if environ is None else environ
    name = environ.get("SUDO_USER")
    if not name:
        return None
    try:
        entry = pwd.getpwnam(name)
    except KeyError:
        return None
    return entry.pw_uid, entry.pw_gid


def chown_to(path, owner):
    """chown path to owner, a (uid, gid) tuple, if owner is known"""
    if owner is None:
        return
    os.chown(path, *owner)
