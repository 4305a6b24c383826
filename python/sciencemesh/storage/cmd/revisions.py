"""
CLI command that lists (and optionally restores) previous revisions of a file
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure, format_time

default_name = "revisions"
help = "list or restore previous revisions of a file"
description = \
"""list the previous revisions of a file, one per line, giving each revision's key, size, and
modification time.  With --restore, the revision with the given key is made the current version
of the file instead."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, help="the path to the file")
    p.add_argument("-R", "--restore", type=str, dest="restore", metavar="KEY",
                   help="restore the revision with the given key")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    ref = Reference(path=args.path)
    try:
        if args.restore:
            fs.restore_revision(ctx, ref, args.restore)
            explain(log, "%s: restored revision %s", args.path, args.restore)
            return

        for rev in fs.list_revisions(ctx, ref):
            print("%s %12d  %s" % (rev.key, rev.size, format_time(rev.mtime)))
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.path) from ex
