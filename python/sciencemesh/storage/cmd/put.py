"""
CLI command that uploads a file
"""
import os, logging, argparse, mimetypes
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import CommandFailure, explain, EXIT_BAD_INPUT
from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "put"
help = "upload a file"
description = \
"""upload a local file into the storage.  If PATH ends in a slash, it is taken to be a folder and
the file is written into it with its local name.  If the file already exists in the storage, its
current contents are saved as a revision."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("file", metavar="FILE", type=str, help="the local file to upload")
    p.add_argument("path", metavar="PATH", type=str, help="the destination path in the storage")
    p.add_argument("-t", "--content-type", type=str, dest="ctype", metavar="MIMETYPE",
                   help="the MIME type of the file contents (default: guessed from FILE's extension)")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    infile = args.file
    if not os.path.isabs(infile):
        infile = os.path.join(config.get('working_dir', '.'), infile)
    if not os.path.isfile(infile):
        raise CommandFailure(args.cmd, "%s: file not found" % args.file, EXIT_BAD_INPUT)

    dest = args.path
    if dest.endswith('/'):
        dest += os.path.basename(infile)
    ctype = args.ctype or mimetypes.guess_type(infile)[0]

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        with open(infile, 'rb') as fd:
            fs.upload(ctx, Reference(path=dest), fd, ctype)
    except OSError as ex:
        raise CommandFailure(args.cmd, "%s: trouble reading file: %s" % (args.file, str(ex)),
                             EXIT_BAD_INPUT, ex) from ex
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, dest) from ex
    explain(log, "uploaded %s to %s", args.file, dest)
