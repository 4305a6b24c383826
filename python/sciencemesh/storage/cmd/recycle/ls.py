"""
CLI subcommand that lists the items in the recycle bin
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from ...exceptions import StorageException
from .. import open_storage, storage_failure, format_time
from . import subcmd_name

default_name = "ls"
help = "list the items in the recycle bin"
description = \
"""list the items in the recycle bin, one per line, giving each item's key (used to restore or
purge it), its size, and the time it was deleted."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, nargs="?", default="/",
                   help="the storage path to list deleted items for (default: /)")
    p.add_argument("-k", "--key", type=str, dest="key", default="", metavar="KEY",
                   help="list the contents of the deleted folder with the given key")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}
    cmd = subcmd_name(args)

    fs, ctx = open_storage(cmd, args, config, log)
    try:
        items = fs.list_recycle(ctx, args.key, args.path)
    except StorageException as ex:
        raise storage_failure(cmd, ex, args.path) from ex

    for item in items:
        secs = item.deletion_time.seconds if item.deletion_time else 0
        print("%s %12d  %s" % (item.key, item.size, format_time(secs)))
