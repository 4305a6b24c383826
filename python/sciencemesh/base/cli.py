"""
the framework behind the ``ncfs`` command-line tool:  a program made up of named commands, where a
command may itself be a suite of subcommands (as with ``ncfs recycle empty``).

A command is implemented by a module (or object) that provides:

``default_name``
    the name the command is invoked as by default
``help``
    a one-line description shown in the parent command's help
``description``
    a longer description shown in the command's own help
``load_into(subparser, as_cmd=None)``
    a function that defines the command's arguments into the given ``ArgumentParser``.  It
    returns None or, for a command with its own subcommands, a :py:class:`CommandSuite`.
``execute(args, config, log)``
    a function that runs the command (not needed when ``load_into()`` returns a suite)

A command reports failure by raising a :py:class:`CommandFailure`, which carries the status the
program should exit with (see the ``EXIT_*`` constants).
"""
import os, sys, logging
from copy import deepcopy
from argparse import ArgumentParser, HelpFormatter, Namespace
from collections.abc import Mapping

from . import config as cfgmod
from .config import ConfigurationException

EXPLAIN = cfgmod.NORMAL

EXIT_OK           = 0
EXIT_FAILED       = 1    # includes a requested file or folder not existing
EXIT_USAGE        = 2
EXIT_BAD_INPUT    = 3
EXIT_BAD_OUTPUT   = 4
EXIT_STORAGE      = 5
EXIT_CONFIG       = 6
EXIT_UNAUTHORIZED = 9
EXIT_UNKNOWN_CMD  = 10

_stderr_handler = None

def explain(log, message, *params):
    """
    log a message at the EXPLAIN level, which falls between DEBUG and INFO:  it goes to the log
    file but reaches the terminal only with --verbose.
    """
    log.log(EXPLAIN, message, *params)

class _ParagraphFormatter(HelpFormatter):
    # wrap each blank-line-separated paragraph of a description on its own
    def _fill_text(self, text, width, indent):
        return "\n\n".join(super(_ParagraphFormatter, self)._fill_text(para, width, indent)
                           for para in text.split("\n\n"))

def define_prog_opts(progname: str, description: str=None, epilog: str=None) -> ArgumentParser:
    """
    create the parser for a command-line program's global options (those that precede the command
    name).  Commands get loaded into it via a :py:class:`CLISuite`.
    """
    morehelp = "Run '%(prog)s CMD -h' for help specifically on CMD."
    if epilog:
        morehelp += "\n\n" + epilog
    parser = ArgumentParser(progname, description=description, epilog=morehelp,
                            formatter_class=_ParagraphFormatter)

    parser.add_argument("-c", "--config", type=str, dest='conf', metavar='FILE',
                        help="read the storage configuration from FILE")
    parser.add_argument("-U", "--user", type=str, dest="user", metavar='USERNAME',
                        help="the name of the storage user to act as; default: the login name of the "+
                             "user running this command")
    parser.add_argument("-w", "--workdir", type=str, dest='workdir', metavar='DIR', default="",
                        help="resolve local files (including the log) relative to DIR; default='.'")
    parser.add_argument("-l", "--logfile", type=str, dest='logfile', metavar='FILE',
                        help="log messages to FILE (within the working directory)")
    parser.add_argument("-q", "--quiet", action="store_true", dest='quiet',
                        help="do not print error messages to standard error")
    parser.add_argument("-v", "--verbose", action="store_true", dest='verbose',
                        help="print INFO and (with -D) DEBUG messages to the terminal")
    parser.add_argument("-D", "--debug", action="store_true", dest='debug',
                        help="send DEBUG level messages to the log file")
    return parser

class CommandFailure(Exception):
    """
    an exception indicating that a command could not complete.  The program should exit with
    the status given by the ``stat`` attribute.
    """

    def __init__(self, cmdname, message, exstat=EXIT_FAILED, cause=None):
        """
        :param str cmdname:   the name of the command that failed
        :param str message:   an explanation of what went wrong
        :param int exstat:    the status to exit with
        :param Exception cause:  the exception that triggered this failure (optional)
        """
        if not message:
            message = str(cause) if cause else "Unknown command failure"
        super(CommandFailure, self).__init__(message)
        self.stat = exstat
        self.cmd = cmdname
        self.cause = cause

class CommandSuite(object):
    """
    a set of commands, one of which is selected by name on the command line.  A suite created with
    a parent parser (e.g. ``recycle``) adds its subcommands into that parser and records the
    selected name in the ``<suitename>_subcmd`` argument.
    """

    def __init__(self, suitename: str, parent_parser: ArgumentParser=None):
        self.suitename = suitename
        self.dest = suitename + "_subcmd"
        self._cmds = {}
        self._subparsers = None
        if parent_parser:
            self._subparsers = parent_parser.add_subparsers(title="subcommands", dest=self.dest)

    def load_subcommand(self, cmdmod, cmdname: str=None):
        """
        add a command to this suite.  See the module documentation for the interface ``cmdmod``
        must provide.
        :param str cmdname:  the name to invoke the command as (default: ``cmdmod.default_name``)
        """
        if not hasattr(cmdmod, "load_into"):
            raise ValueError("command module/object has no load_into() function: " + repr(cmdmod))
        if not cmdname:
            cmdname = cmdmod.default_name

        subparser = self._subparsers.add_parser(cmdname, help=cmdmod.help,
                                                description=getattr(cmdmod, 'description', None),
                                                formatter_class=_ParagraphFormatter)
        self._cmds[cmdname] = cmdmod.load_into(subparser, cmdname) or cmdmod

    def execute(self, args: Namespace, config: Mapping=None, log=None):
        """
        run the subcommand selected in the given arguments
        """
        if not log:
            log = logging.getLogger(self.suitename)
        return self._dispatch(getattr(args, self.dest, None), args, config, log, EXIT_UNKNOWN_CMD)

    def _dispatch(self, name, args, config, log, badstat):
        cmd = self._cmds.get(name)
        if cmd is None:
            raise CommandFailure(self.suitename, "Unrecognized command for %s: %s" %
                                 (self.suitename, name), badstat)
        try:
            return cmd.execute(args, config, log.getChild(name))
        except CommandFailure as ex:
            # report a nested failure by its full command, e.g. "recycle purge"
            if ex.cmd and ex.cmd != name:
                ex.cmd = name + ' ' + ex.cmd
            else:
                ex.cmd = name
            raise

class CLISuite(CommandSuite):
    """
    the top-level suite of a command-line program.  Before running the selected command, it
    loads the configuration, settles the working directory, and sets up logging.
    """

    def __init__(self, progname: str, defconffile: str=None, parser: ArgumentParser=None):
        """
        :param str progname:     the program name
        :param str defconffile:  the configuration file to read when --config is not given; it
                                 is ignored if it does not exist.
        :param ArgumentParser parser:  the parser for the global options (default: one created
                                 by :py:func:`define_prog_opts`)
        """
        super(CLISuite, self).__init__(progname)
        self.parser = parser or define_prog_opts(progname)
        self.dest = "cmd"
        self._subparsers = self.parser.add_subparsers(title="commands", dest=self.dest)
        self._defconffile = defconffile

    def parse_args(self, args: list) -> Namespace:
        return self.parser.parse_args(args)

    def load_config(self, args: Namespace) -> dict:
        """
        read the configuration from the file given by --config or else from the default
        configuration file, if it exists.
        :raises ConfigurationException:  if the file cannot be read or parsed
        """
        conffile = args.conf
        if not conffile and self._defconffile and os.path.isfile(self._defconffile):
            conffile = self._defconffile
        if not conffile:
            return {}
        return deepcopy(cfgmod.load_from_file(conffile))

    def execute(self, args, config: Mapping=None):
        """
        run the command given in the arguments
        :param list|Namespace args:  the program arguments (starting with the global options), either
                                     as a list of strings or already parsed
        :param dict config:          the configuration to use; if not provided, it will be loaded
                                     via :py:meth:`load_config`.
        """
        argv = None
        if isinstance(args, list):
            argv = args
            args = self.parse_args(args)
        if args.cmd not in self._cmds:
            raise CommandFailure(args.cmd, "Unrecognized command: "+str(args.cmd), EXIT_USAGE)

        config = self.load_config(args) if config is None else deepcopy(config)
        config['working_dir'] = _working_dir(args, config)
        log = setup_logging(self.suitename, args, config)
        if argv:
            explain(log, "Executing: %s %s", self.suitename, " ".join(argv))

        try:
            return self._dispatch(args.cmd, args, config, log, EXIT_USAGE)
        except ConfigurationException as ex:
            raise CommandFailure(args.cmd, "Configuration error: "+str(ex), EXIT_CONFIG, ex)

def _working_dir(args, config):
    if args.workdir:
        workdir = os.path.abspath(args.workdir)
        if not os.path.isdir(workdir):
            raise CommandFailure(args.cmd, "Working dir is not an existing directory: "+workdir,
                                 EXIT_USAGE)
        return workdir
    return os.path.abspath(config.get('working_dir', os.getcwd()))

def setup_logging(progname: str, args: Namespace, config: dict) -> logging.Logger:
    """
    send log messages to the log file and, unless --quiet was given, warnings and errors (or,
    with --verbose, everything at INFO and above) to standard error.  The log file is
    ``<progname>.log`` in the working directory unless --logfile or the ``logfile`` and ``logdir``
    config parameters say otherwise.  The configured ``loglevel`` applies unless --debug was given.
    :return:  the Logger for the program
    """
    global _stderr_handler
    if args.logfile:
        config['logfile'] = os.path.join(config['working_dir'], args.logfile)
    else:
        config.setdefault('logfile', progname + ".log")
    config.setdefault('logdir', config['working_dir'])
    cfgmod.configure_log(level=logging.DEBUG if args.debug else None, config=config)

    rootlog = logging.getLogger()
    if _stderr_handler:
        rootlog.removeHandler(_stderr_handler)
        _stderr_handler = None
    if not args.quiet:
        _stderr_handler = logging.StreamHandler(sys.stderr)
        if args.verbose:
            _stderr_handler.setLevel(logging.DEBUG if args.debug else logging.INFO)
            _stderr_handler.setFormatter(logging.Formatter("%(name)s %(levelname)s: %(message)s"))
        else:
            _stderr_handler.setLevel(logging.WARNING)
            _stderr_handler.setFormatter(logging.Formatter(progname+" %(levelname)s: %(message)s"))
        rootlog.addHandler(_stderr_handler)

    log = logging.getLogger("cli."+progname)
    if args.verbose:
        log.info("FYI: Writing log messages to %s", cfgmod.global_logfile)
    return log
