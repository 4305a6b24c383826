"""
package providing the ``recycle`` command, which manages the user's recycle bin via subcommands:
  - ``ls``:       list the items in the recycle bin
  - ``restore``:  restore an item to its original location (or a new one)
  - ``purge``:    permanently delete an item
  - ``empty``:    permanently delete all items
"""
import argparse

from sciencemesh.base import cli

default_name = "recycle"
help = "manage deleted items via subcommands"
description = \
"""list, restore, or permanently delete items in the recycle bin"""

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    """
    load this command into a CLI by defining the command's arguments and options.
    :param argparser.ArgumentParser subparser:  the argument parser instance to define this command's
                                                interface into it
    """
    from . import ls, restore, purge, empty

    subparser.description = description

    if not as_cmd:
        as_cmd = default_name
    out = cli.CommandSuite(as_cmd, subparser)
    out.load_subcommand(ls)
    out.load_subcommand(restore)
    out.load_subcommand(purge)
    out.load_subcommand(empty)

    return out

def subcmd_name(args) -> str:
    """
    return the name of the recycle subcommand that was invoked
    """
    return getattr(args, default_name+"_subcmd", None) or default_name
