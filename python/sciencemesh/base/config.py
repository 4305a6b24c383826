"""
Utilities for loading configuration data and setting up logging.

Configuration is a (nested) dictionary, typically read from a YAML or JSON file via
:py:func:`load_from_file`.  Component classes take the portion of the configuration
relevant to them as a ``Mapping`` at construction time and raise a
:py:class:`ConfigurationException` when a required parameter is missing or has a bad value.
"""
import os, json, logging
from collections.abc import Mapping
from copy import deepcopy

import yaml

from . import ScienceMeshException

NORMAL = logging.INFO - 5    # quieter than INFO, louder than DEBUG
logging.addLevelName(NORMAL, "NORMAL")

global_logdir = None
global_logfile = None
_log_handler = None

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

class ConfigurationException(ScienceMeshException):
    """
    an exception indicating that configuration data is missing, incomplete, or otherwise
    erroneous.
    """
    def __init__(self, message: str=None, cause: Exception=None):
        if not message:
            message = "Configuration error"
            if cause:
                message += ": " + str(cause)
        super(ConfigurationException, self).__init__(message, cause)

def load_from_file(configfile: str) -> Mapping:
    """
    read the configuration from the given file and return it as a dictionary.  The file
    format is determined by the file's extension: ".json" is read as JSON; anything else
    is read as YAML (which is a superset of JSON).

    :raises ConfigurationException:  if the file cannot be read or parsed
    """
    try:
        with open(configfile) as fd:
            if configfile.endswith(".json"):
                data = json.load(fd)
            else:
                data = yaml.safe_load(fd)
    except OSError as ex:
        raise ConfigurationException("%s: unable to read config file: %s" %
                                     (configfile, str(ex)), cause=ex) from ex
    except (ValueError, yaml.YAMLError) as ex:
        raise ConfigurationException("%s: config file syntax error: %s" %
                                     (configfile, str(ex)), cause=ex) from ex

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigurationException("%s: config file does not contain a dictionary" % configfile)
    return data

def merge_config(primary: Mapping, defconf: Mapping) -> Mapping:
    """
    merge the primary configuration on top of a default configuration, returning a new
    dictionary.  Nested dictionaries are merged recursively; other values in ``primary``
    override those in ``defconf``.
    """
    out = deepcopy(defconf)
    for key, val in primary.items():
        if isinstance(val, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = merge_config(val, out[key])
        else:
            out[key] = deepcopy(val)
    return out

def configure_log(logfile: str=None, level: int=None, format: str=None, config: Mapping=None,
                  addstderr=False):
    """
    configure the root logger to write to a log file.  The log file location is taken from
    ``logfile`` if given, otherwise from the ``logfile`` config parameter; a relative path
    is interpreted relative to ``logdir`` (from the config) or the current directory.

    :param str   logfile:  the path to the log file to write to
    :param int     level:  the minimum level of messages to record (default: NORMAL)
    :param str    format:  the message format (default: ``LOG_FORMAT``)
    :param dict   config:  configuration data that may contain ``logfile``, ``logdir``, and
                           ``loglevel`` parameters
    :param bool addstderr: if True, also send messages to standard error
    """
    global global_logdir, global_logfile, _log_handler
    if not config:
        config = {}
    if not logfile:
        logfile = config.get('logfile', 'sciencemesh.log')
    if level is None:
        level = config.get('loglevel', NORMAL)
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                raise ConfigurationException("loglevel: unrecognized level name: " +
                                             str(config.get('loglevel')))
    if not format:
        format = config.get('logformat', LOG_FORMAT)

    if not os.path.isabs(logfile):
        global_logdir = config.get('logdir', os.getcwd())
        logfile = os.path.join(global_logdir, logfile)
    else:
        global_logdir = os.path.dirname(logfile)
    global_logfile = logfile

    rootlog = logging.getLogger()
    if _log_handler:
        rootlog.removeHandler(_log_handler)
        _log_handler.close()
    _log_handler = logging.FileHandler(logfile)
    _log_handler.setLevel(level)
    _log_handler.setFormatter(logging.Formatter(format))
    rootlog.addHandler(_log_handler)
    if rootlog.level == logging.NOTSET or rootlog.level > level:
        rootlog.setLevel(level)

    if addstderr:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(format))
        rootlog.addHandler(handler)

    return rootlog
