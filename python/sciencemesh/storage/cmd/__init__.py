"""
package that provides implementations of commands that make up the ``ncfs`` command-line tool for
manipulating files in a storage space through a storage driver.  This package is incorporated into
:py:mod:`sciencemesh.cli.ncfs`.

(See :py:mod:`sciencemesh.base.cli` for information on the framework for building up tool suites
like ``ncfs``.)

The commands include:
  - ``home``:     print (and optionally create) the user's home folder
  - ``stat``:     print the metadata describing a file or folder
  - ``ls``:       list the contents of a folder
  - ``mkdir``:    create a folder
  - ``rm``:       delete a file or folder (moving it to the recycle bin)
  - ``mv``:       move or rename a file or folder
  - ``get``:      download a file
  - ``put``:      upload a file
  - ``revisions``:  list or restore previous revisions of a file
  - ``meta``:     set or remove arbitrary metadata on a file or folder
  - ``grants``:   list or change the permissions granted to other users
  - ``quota``:    print the user's storage quota and usage
  - ``recycle``:  manage the recycle bin via subcommands
"""
import time
from collections.abc import Mapping
from getpass import getuser
from logging import Logger
from typing import Tuple

from sciencemesh.base.cli import (CommandFailure, CommandSuite, EXIT_FAILED, EXIT_STORAGE, EXIT_CONFIG,
                                   EXIT_UNAUTHORIZED)
from sciencemesh.base.config import ConfigurationException
from sciencemesh.cs3.identity import User, UserId, UserType
from .. import registry
from ..base import FS
from ..ctx import Context
from ..exceptions import (StorageException, ResourceNotFound, StorageUserUnauthorized, NotSupported,
                          StorageCommError)

DEF_IDP = "localhost"

def load_commands(suite: CommandSuite):
    """
    load all of the ``ncfs`` commands into the given suite
    """
    from . import home, stat, ls, mkdir, rm, mv, get, put, revisions, meta, grants, quota, recycle
    for mod in (home, stat, ls, mkdir, rm, mv, get, put, revisions, meta, grants, quota, recycle):
        suite.load_subcommand(mod)

def get_user(args, config: Mapping) -> User:
    """
    return the User that a command should act as:  the one given via --user or, by default,
    the user running the command.  The identity provider is taken from the ``idp`` config parameter.
    """
    who = getattr(args, 'user', None)
    if not who:
        who = getuser()
    return User(id=UserId(idp=config.get("idp", DEF_IDP), opaque_id=who, type=UserType.PRIMARY),
                username=who)

def open_storage(cmdname: str, args, config: Mapping, log: Logger) -> Tuple[FS, Context]:
    """
    create the storage driver selected by the configuration along with a request context for the
    requesting user.
    :raises CommandFailure:  if the configuration is insufficient for creating the driver
    """
    try:
        fs = registry.open_storage(config, log.getChild("storage"))
    except ConfigurationException as ex:
        raise CommandFailure(cmdname, "Config error: "+str(ex), EXIT_CONFIG, ex) from ex
    return fs, Context(get_user(args, config), log)

def storage_failure(cmdname: str, ex: StorageException, target: str=None) -> CommandFailure:
    """
    convert an exception raised by a storage driver into a CommandFailure with an appropriate
    exit status.
    """
    prefix = (target + ": ") if target else ""
    if isinstance(ex, ResourceNotFound):
        return CommandFailure(cmdname, prefix+"not found", EXIT_FAILED, ex)
    if isinstance(ex, StorageUserUnauthorized):
        return CommandFailure(cmdname, prefix+"not authorized", EXIT_UNAUTHORIZED, ex)
    if isinstance(ex, NotSupported):
        return CommandFailure(cmdname, prefix+str(ex), EXIT_FAILED, ex)
    if isinstance(ex, StorageCommError):
        return CommandFailure(cmdname, "Unable to reach storage service: "+str(ex), EXIT_STORAGE, ex)
    return CommandFailure(cmdname, prefix+"storage error: "+str(ex), EXIT_STORAGE, ex)

def format_time(secs: int) -> str:
    if not secs:
        return "-"
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(secs))
