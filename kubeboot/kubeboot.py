"""
kubeboot
========

The main entry point for bootstrapping a kubeadm cluster node.
Don't use it directly, instead install the package with setup.py.
It automatically creates an executable in your path.

"""
import argparse
import sys

from mach import mach1

from . import __version__
from .bootstrap import Bootstrap
from .cli import prepare_node
from .config import Context
from .executor import Executor, CommandFailed
from .handoff import JoinFile, JoinTimeout
from .util.logger import Logger
from .util.net import split_nodes
from .util.util import ensure_root, invoking_user

LOGGER = Logger(__name__)


def load_context(config):
    """read the configuration or exit"""
    try:
        return Context.from_file(config or None)
    except ValueError as exc:
        LOGGER.error(f"Error: {exc}")
        sys.exit(1)


@mach1()
class Kubeboot:  # pylint: disable=no-self-use
    """
    The main entry point for the program. This class does the CLI parsing
    and decides which action should be taken
    """
    def __init__(self):
        self.parser.add_argument(  # pylint: disable=no-member
            "--version", action="store_true",
            help="show version and exit",
            default=argparse.SUPPRESS)

        verbosity_help = "".join([
            "set the verbosity level (",
            "0 = quiet, ",
            "1 = error, ",
            "2 = warning, ",
            "3 = info, ",
            "4 = debug)"])
        self.parser.add_argument("--verbosity",  # pylint: disable=no-member
                                 "-v",
                                 help=verbosity_help,
                                 choices=['0', '1', '2', '3', '4', 'quiet',
                                          'error', 'warning', 'info', 'debug'],
                                 type=str,
                                 default='3')

    def _get_version(self, *_):
        print("%s version: %s" % (self.__class__.__name__, __version__))
        sys.exit(0)

    def _get_verbosity(self, level):
        LOGGER.level = level

    def setup(self, nodes: str = "", config: str = ""):
        """
        Bootstrap this node as master or worker
        nodes - comma separated node addresses, the master's first
        config - YAML file adapting paths and options to this environment
        ---
        Without nodes the host name decides: a host matching master_hostname
        initializes the cluster, all others wait for the join file.
        """
        ensure_root()
        context = load_context(config)
        try:
            addresses = split_nodes(nodes)
        except ValueError as exc:
            LOGGER.error(f"Error: {exc}")
            sys.exit(1)

        owner = invoking_user()
        prepare_node(context, owner)
        executor = Executor(debug=context.debug)

        try:
            Bootstrap(context, executor, owner).run(addresses)
        except (CommandFailed, JoinTimeout, ValueError, OSError) as exc:
            LOGGER.error(f"Error: {exc}")
            sys.exit(1)

    def joincommand(self, config: str = ""):
        """
        Print the join command found in the join file
        config - YAML file adapting paths and options to this environment
        """
        context = load_context(config)
        bootstrap = Bootstrap(context, Executor(debug=context.debug))
        try:
            print(bootstrap.join_command())
        except (ValueError, OSError) as exc:
            LOGGER.error(f"Error: {exc}")
            sys.exit(1)

    def cleanup(self, config: str = ""):
        """
        Delete the join file
        config - YAML file adapting paths and options to this environment
        """
        ensure_root()
        context = load_context(config)
        if JoinFile(context.join_file).remove():
            LOGGER.success("Removed %s", context.join_file)
        else:
            LOGGER.info("%s does not exist", context.join_file)


def main():
    """
    run and execute kubeboot
    """
    k = Kubeboot()

    # pylint: disable=no-member
    k.parser.description = 'Set up a kubeadm cluster node. Run "setup" '\
                           'with the node addresses on the master and '\
                           'without on the workers.'

    # the mach decorator analyzes the methods in the class and dynamically
    # creates the CLI parser. It also adds the method run to the class.
    k.run()  # pylint: disable=no-member
