"""
CLI command that prints the metadata describing a file or folder
"""
import json, logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.cs3.provider import Reference, ResourceInfo
from ..exceptions import StorageException
from . import open_storage, storage_failure, format_time

default_name = "stat"
help = "print a description of a file or folder"
description = \
"""print the metadata describing a file or folder:  its type, size, modification time, etag,
MIME type, and any arbitrary metadata attached to it."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    """
    load this command into a CLI by defining the command's arguments and options.
    :param argparser.ArgumentParser subparser:  the argument parser instance to define this command's
                                                interface into it
    :rtype: None
    """
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, help="the path to the file or folder to describe")
    p.add_argument("-k", "--key", action="append", dest="mdkeys", metavar="KEY",
                   help="include the arbitrary metadata item with name KEY; can be repeated")
    p.add_argument("-j", "--json", action="store_true", dest="json",
                   help="print the full description in JSON format")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        info = fs.get_md(ctx, Reference(path=args.path), args.mdkeys)
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.path) from ex

    if args.json:
        print(json.dumps(info.to_dict(), indent=2))
    else:
        print(describe(info))

def describe(info: ResourceInfo) -> str:
    """
    format the given resource metadata for display
    """
    lines = [
        "path:      %s" % info.path,
        "type:      %s" % ("folder" if info.is_container else "file"),
        "size:      %d" % info.size,
        "modified:  %s" % format_time(info.mtime.seconds if info.mtime else 0),
        "etag:      %s" % (info.etag or ""),
        "mimetype:  %s" % (info.mime_type or "")
    ]
    if info.arbitrary_metadata:
        for key, val in info.arbitrary_metadata.metadata.items():
            lines.append("  %s: %s" % (key, val))
    return "\n".join(lines)
