"""
CLI command that prints the path to the user's home folder
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "home"
help = "print the path to the user's home folder"
description = \
"""print the path to the user's home folder within the storage.  With --create, the home folder
is first created if it does not yet exist."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    """
    load this command into a CLI by defining the command's arguments and options.
    :param argparser.ArgumentParser subparser:  the argument parser instance to define this command's
                                                interface into it
    :rtype: None
    """
    p = subparser
    p.description = description
    p.add_argument("-C", "--create", action="store_true", dest="create",
                   help="create the home folder if necessary")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        if args.create:
            explain(log, "creating home for %s", ctx.user.username)
            fs.create_home(ctx)
        print(fs.get_home(ctx))
    except StorageException as ex:
        raise storage_failure(args.cmd, ex) from ex
