"""
CLI command that creates a folder
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import explain
from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "mkdir"
help = "create a folder"
description = \
"""create a new folder.  The parent folder must already exist."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("paths", metavar="PATH", type=str, nargs="+", help="the path to the folder to create")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    for path in args.paths:
        try:
            fs.create_dir(ctx, Reference(path=path))
        except StorageException as ex:
            raise storage_failure(args.cmd, ex, path) from ex
        explain(log, "created folder %s", path)
