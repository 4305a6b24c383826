"""
CLI command that sets or removes arbitrary metadata on a file or folder
"""
import logging, argparse
from logging import Logger
from collections import OrderedDict
from collections.abc import Mapping

from sciencemesh.base.cli import CommandFailure, EXIT_USAGE
from sciencemesh.cs3.provider import Reference, ArbitraryMetadata
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "meta"
help = "set or remove arbitrary metadata on a file or folder"
description = \
"""attach NAME=VALUE metadata items to a file or folder, or (with --unset) remove the named
items from it."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, help="the path to the file or folder")
    p.add_argument("items", metavar="NAME=VALUE", type=str, nargs="*",
                   help="a metadata item to set")
    p.add_argument("-u", "--unset", action="append", dest="unset", metavar="NAME", default=[],
                   help="remove the metadata item with the given name; can be repeated")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    md = OrderedDict()
    for item in args.items:
        name, eq, val = item.partition('=')
        if not name or not eq:
            raise CommandFailure(args.cmd, "%s: metadata item not of form NAME=VALUE" % item,
                                 EXIT_USAGE)
        md[name] = val
    if not md and not args.unset:
        raise CommandFailure(args.cmd, "No metadata items specified", EXIT_USAGE)

    fs, ctx = open_storage(args.cmd, args, config, log)
    ref = Reference(path=args.path)
    try:
        if md:
            fs.set_arbitrary_metadata(ctx, ref, ArbitraryMetadata(metadata=md))
        if args.unset:
            fs.unset_arbitrary_metadata(ctx, ref, args.unset)
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.path) from ex
