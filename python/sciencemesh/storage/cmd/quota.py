"""
CLI command that prints the user's storage quota and current usage
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "quota"
help = "print storage quota and usage"
description = \
"""print the total number of bytes available to the user and the number currently used"""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    subparser.description = description
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        total, used = fs.get_quota(ctx)
    except StorageException as ex:
        raise storage_failure(args.cmd, ex) from ex

    print("total: %d" % total)
    print("used:  %d" % used)
    print("free:  %d" % max(total - used, 0))
