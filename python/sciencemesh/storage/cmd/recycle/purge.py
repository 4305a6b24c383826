"""
CLI subcommand that permanently deletes items from the recycle bin
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from ...exceptions import StorageException
from .. import open_storage, storage_failure
from . import subcmd_name

default_name = "purge"
help = "permanently delete items from the recycle bin"
description = \
"""permanently delete the deleted items identified by the given keys (see "recycle ls")"""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("keys", metavar="KEY", type=str, nargs="+", help="the key identifying a deleted item")
    p.add_argument("-p", "--path", type=str, dest="path", metavar="PATH", default="/",
                   help="the storage path the items were listed under (default: /)")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}
    cmd = subcmd_name(args)

    fs, ctx = open_storage(cmd, args, config, log)
    for key in args.keys:
        try:
            fs.purge_recycle_item(ctx, key, args.path)
        except StorageException as ex:
            raise storage_failure(cmd, ex, key) from ex
        explain(log, "purged %s", key)
