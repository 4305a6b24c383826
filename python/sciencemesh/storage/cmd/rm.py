"""
CLI command that deletes files and folders
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "rm"
help = "delete files or folders"
description = \
"""delete the given files or folders.  Deleted items are moved to the recycle bin, from which
they can be restored (see "recycle restore")."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("paths", metavar="PATH", type=str, nargs="+", help="the path to the item to delete")
    p.add_argument("-f", "--force", action="store_true", dest="force",
                   help="ignore items that do not exist")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    for path in args.paths:
        try:
            fs.delete(ctx, Reference(path=path))
        except StorageException as ex:
            failure = storage_failure(args.cmd, ex, path)
            if args.force and failure.stat == 1:
                log.warning("%s: not found; skipping", path)
                continue
            raise failure from ex
        explain(log, "deleted %s", path)
