"""
ncfs command-line program for manipulating the files in a user's storage space through a storage
driver (by default, the Nextcloud driver).
"""
import logging, os, sys

from sciencemesh.base import cli
from sciencemesh.base.config import ConfigurationException
from sciencemesh.storage import cmd

description = \
"""access files in a Nextcloud-backed storage space

The storage driver and its connection parameters are read from a configuration file (given via
--config or, by default, the file named by the NCFS_CONFIG environment variable or ~/.ncfs.yml).
The configuration's "driver" parameter selects the driver, and "drivers.NAME" provides its
parameters.
"""
epilog = None
default_prog_name = "ncfs"
default_conf_file = os.environ.get("NCFS_CONFIG", os.path.join(os.path.expanduser("~"), ".ncfs.yml"))

def main(cmdname, args):
    """
    a function that executes the ``ncfs`` command-line tool.
    """
    if not cmdname:
        cmdname = default_prog_name

    argparser = cli.define_prog_opts(cmdname, description, epilog)
    ncfs = cli.CLISuite(cmdname, default_conf_file, argparser)
    cmd.load_commands(ncfs)

    # execute the command
    ncfs.execute(args)
    return args

def run():
    """
    run ``ncfs`` with the arguments given on the command line, exiting with the appropriate status
    """
    prog = os.path.splitext(os.path.basename(sys.argv[0]))[0] or default_prog_name
    try:
        main(prog, sys.argv[1:])
        sys.exit(cli.EXIT_OK)
    except cli.CommandFailure as ex:
        logging.getLogger(f"{prog} {ex.cmd}").critical(str(ex))
        sys.exit(ex.stat)
    except ConfigurationException as ex:
        logging.getLogger(prog).critical("Config error: "+str(ex))
        sys.exit(cli.EXIT_CONFIG)
    except Exception as ex:
        logging.getLogger(prog).exception(ex)
        sys.exit(200)

if __name__ == "__main__":
    run()
