"""
CLI command that downloads a file (or a previous revision of it)
"""
import os, sys, shutil, logging, argparse, posixpath
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import CommandFailure, explain, EXIT_USAGE, EXIT_BAD_OUTPUT
from sciencemesh.cs3.provider import Reference
from ..exceptions import StorageException
from . import open_storage, storage_failure

default_name = "get"
help = "download a file"
description = \
"""download the contents of a file.  By default, the file is written into the working directory
with the same name it has in the storage; use -o to choose a different output file ("-" for
standard output).  With --revision, a previous version of the file is downloaded."""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, help="the path to the file to download")
    p.add_argument("-o", "--output", type=str, dest="output", metavar="FILE",
                   help="write the contents to FILE")
    p.add_argument("-r", "--revision", type=str, dest="revision", metavar="KEY",
                   help="download the revision with the given key (see 'ncfs revisions')")
    return None

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    outfile = args.output
    if not outfile:
        outfile = posixpath.basename(args.path.rstrip('/'))
        if not outfile:
            raise CommandFailure(args.cmd, "%s: not a file path" % args.path, EXIT_USAGE)
    if outfile != "-" and not os.path.isabs(outfile):
        outfile = os.path.join(config.get('working_dir', '.'), outfile)

    fs, ctx = open_storage(args.cmd, args, config, log)
    ref = Reference(path=args.path)
    try:
        if args.revision:
            stream = fs.download_revision(ctx, ref, args.revision)
        else:
            stream = fs.download(ctx, ref)
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.path) from ex

    try:
        if outfile == "-":
            shutil.copyfileobj(stream, sys.stdout.buffer)
            sys.stdout.flush()
        else:
            with open(outfile, 'wb') as fd:
                shutil.copyfileobj(stream, fd)
    except OSError as ex:
        raise CommandFailure(args.cmd, "%s: trouble writing file: %s" % (outfile, str(ex)),
                             EXIT_BAD_OUTPUT, ex) from ex
    finally:
        stream.close()

    if outfile != "-":
        explain(log, "downloaded %s to %s", args.path, outfile)
