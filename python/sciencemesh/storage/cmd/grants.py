"""
CLI command that lists or changes the grants (shares) on a file or folder
"""
import logging, argparse
from logging import Logger
from collections.abc import Mapping

from sciencemesh.base.cli import CommandFailure, explain, EXIT_USAGE
from sciencemesh.cs3.identity import UserId, UserType
from sciencemesh.cs3.provider import (Reference, Grant, Grantee, GranteeType, ResourcePermissions,
                                      PERMISSION_NAMES)
from ..exceptions import StorageException
from . import open_storage, storage_failure, DEF_IDP

default_name = "grants"
help = "list or change the permissions granted to other users on a file or folder"
description = \
"""With no options, list the grants on a file or folder, one per line, giving the grantee and the
permissions granted.  Otherwise, add, update, remove, or deny a grant for a user.  A user may be
given as IDP:ID or simply ID (in which case the configured idp is assumed).  Permissions are given
by name (e.g. "stat", "list_container", "initiate_file_download"); "all" selects all permissions."""

DEF_PERMS = ["stat", "get_path", "list_container", "initiate_file_download"]

def load_into(subparser: argparse.ArgumentParser, as_cmd: str=None):
    p = subparser
    p.description = description
    p.add_argument("path", metavar="PATH", type=str, help="the path to the file or folder")
    act = p.add_mutually_exclusive_group()
    act.add_argument("-a", "--add", type=str, dest="add", metavar="USER",
                     help="grant permissions to USER")
    act.add_argument("-u", "--update", type=str, dest="update", metavar="USER",
                     help="replace the permissions granted to USER")
    act.add_argument("-r", "--remove", type=str, dest="remove", metavar="USER",
                     help="remove the grant to USER")
    act.add_argument("-d", "--deny", type=str, dest="deny", metavar="USER",
                     help="deny USER all access")
    p.add_argument("-p", "--perm", action="append", dest="perms", metavar="PERM",
                   help="a permission to grant with --add or --update; can be repeated (default: " +
                        ", ".join(DEF_PERMS) + ")")
    return None

def parse_grantee(who: str, config: Mapping) -> Grantee:
    idp, sep, oid = who.rpartition(':')
    if not sep:
        idp = config.get("idp", DEF_IDP)
    return Grantee(type=GranteeType.USER,
                   user_id=UserId(idp=idp, opaque_id=oid, type=UserType.PRIMARY))

def make_permissions(perms) -> ResourcePermissions:
    if not perms:
        perms = DEF_PERMS
    if "all" in perms:
        perms = PERMISSION_NAMES
    bad = [p for p in perms if p not in PERMISSION_NAMES]
    if bad:
        raise ValueError("Unrecognized permission name(s): " + ", ".join(bad))
    return ResourcePermissions(**dict((p, True) for p in perms))

def execute(args, config: Mapping=None, log: Logger=None):
    if not log:
        log = logging.getLogger(default_name)
    if not config:
        config = {}

    ref = Reference(path=args.path)
    who = args.add or args.update or args.remove or args.deny
    if who:
        grantee = parse_grantee(who, config)
        try:
            grant = Grant(grantee=grantee, permissions=make_permissions(args.perms))
        except ValueError as ex:
            raise CommandFailure(args.cmd, str(ex), EXIT_USAGE) from ex

    fs, ctx = open_storage(args.cmd, args, config, log)
    try:
        if args.add:
            fs.add_grant(ctx, ref, grant)
        elif args.update:
            fs.update_grant(ctx, ref, grant)
        elif args.remove:
            fs.remove_grant(ctx, ref, grant)
        elif args.deny:
            fs.deny_grant(ctx, ref, grantee)
        else:
            for g in fs.list_grants(ctx, ref):
                uid = g.grantee.user_id
                perms = g.permissions.granted() if g.permissions else []
                print("%s:%s %s" % (uid.idp, uid.opaque_id, ",".join(perms) or "(none)"))
            return
    except StorageException as ex:
        raise storage_failure(args.cmd, ex, args.path) from ex
    explain(log, "%s: updated grant for %s", args.path, who)
