"""
CLI command that lists the contents of a folder
"""
import logging, argparse, posixpath
from logging import Logger
from collections.abc import Mapping

from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure, format_time

default_name = "ls"
help = "list the contents of a folder"
description = \
"""list the files and folders within a folder.  Folder names are shown with a trailing slash."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    """
    load this command into a CLI by defining the command's arguments and options.
    :param argparser.ArgumentParser subparser:  the argument parser instance to define this command's
                                                interface into it
    :rtype: None
    """
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, nargs="?", default="/",
                   help="the folder to list (default: the top of the user's space)")
    p.add_argument("-l", "--long", action="store_true", dest="long",
                   help="list the size and modification time of each item")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        items = fs.list_folder(ctx, Reference(path=args.path))
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.path) from ex

    for info in sorted(items, key=lambda i: i.path):
        name = posixpath.basename(info.path.rstrip('/'))
        if info.is_container:
            name += '/'
        if args.long:
            print("%s %12d  %s  %s" % ("d" if info.is_container else "-", info.size,
                                       format_time(info.mtime.seconds if info.mtime else 0), name))
        else:
            print(name)
