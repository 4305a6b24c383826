"""
CLI command that moves or renames a file or folder
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "mv"
help = "move or rename a file or folder"
description = \
"""move a file or folder to a new location.  The destination must not already exist."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("src", metavar="SRC", type=str, help="the path to the item to move")
    p.add_argument("dest", metavar="DEST", type=str, help="the item's new path")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        fs.move(ctx, Reference(path=args.src), Reference(path=args.dest))
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.src) from ex
    explain(log, "moved %s to %s", args.src, args.dest)
