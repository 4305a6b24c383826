"""
CLI subcommand that empties the recycle bin
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from ...exceptions import StorageException
from .. import open_storage, storage_failure
from . import subcmd_name

default_name = "empty"
help = "permanently delete all items in the recycle bin"
description = help

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    subparser.description = description
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}
    cmd = subcmd_name(args)

    fs, ctx = open_storage(cmd, args, config, log)
    try:
        fs.empty_recycle(ctx)
    except StorageException as ex:
        raise storage_failure(cmd, ex) from ex
    log.info("recycle bin emptied")
