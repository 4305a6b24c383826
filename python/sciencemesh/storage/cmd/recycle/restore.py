"""
CLI subcommand that restores an item from the recycle bin
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from sciencemesh.cs3.provider import Reference
from ...exceptions import StorageException
from .. import open_storage, storage_failure
from . import subcmd_name

default_name = "restore"
help = "restore an item from the recycle bin"
description = \
"""restore a deleted item, identified by its key (see "recycle ls"), to the location it was
deleted from or, with --to, to a new location."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("key", metavar="KEY", type=str, help="the key identifying the deleted item")
    p.add_argument("-t", "--to", type=str, dest="dest", metavar="PATH",
                   help="restore the item to PATH instead of its original location")
    p.add_argument("-p", "--path", type=str, dest="path", metavar="PATH", default="/",
                   help="the storage path the item was listed under (default: /)")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}
    cmd = subcmd_name(args)

    restore_ref = Reference(path=args.dest) if args.dest else Reference()
    fs, ctx = open_storage(cmd, args, config, log)
    try:
        fs.restore_recycle_item(ctx, args.key, args.path, restore_ref)
    except StorageException as ex:
        raise storage_failure(cmd, ex, args.key) from ex
    explain(log, "restored %s", args.key)
