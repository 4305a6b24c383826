"""
a registry of storage drivers that allows a driver to be instantiated by name.

A driver module registers a factory function when it is imported:

.. code-block::

   from sciencemesh.storage import registry
   registry.register("nextcloud", new_driver)

where the factory accepts the driver's configuration (a ``Mapping``) and an optional
``Logger``, returning an :py:class:`~sciencemesh.storage.base.FS` instance.
"""
from collections.abc import Mapping
from typing import Callable, List
from logging import Logger

from sciencemesh.base.config import ConfigurationException
from .base import FS

DEF_DRIVER = "nextcloud"

_factories = {}

def register(name: str, factory: Callable[[Mapping, Logger], FS]) -> None:
    """
    register a driver factory under a given name, replacing any factory previously registered
    under that name.
    """
    if not name:
        raise ValueError("register(): driver name must not be empty")
    if not callable(factory):
        raise TypeError("register(): factory is not callable: " + repr(factory))
    _factories[name] = factory

def registered() -> List[str]:
    """
    return the names of the registered drivers
    """
    return sorted(_factories.keys())

def new_fs(name: str, config: Mapping=None, log: Logger=None) -> FS:
    """
    create a storage driver instance by its registered name
    :param str      name:  the name of the driver
    :param dict   config:  the driver's configuration
    :param Logger    log:  the Logger the driver should use
    :raises ConfigurationException:  if no driver is registered with the given name, or if
                                     the configuration is insufficient for the driver.
    """
    factory = _factories.get(name)
    if not factory:
        raise ConfigurationException("Unrecognized storage driver name: %s (known drivers: %s)" %
                                     (name, ", ".join(registered()) or "none"))
    if config is None:
        config = {}
    return factory(config, log)

def open_storage(config: Mapping, log: Logger=None) -> FS:
    """
    create the storage driver selected by a configuration.  The configuration's ``driver``
    parameter names the driver (default: "nextcloud") and ``drivers.<name>`` provides that
    driver's configuration.
    """
    name = config.get("driver", DEF_DRIVER)
    drivers = config.get("drivers", {})
    if not isinstance(drivers, Mapping):
        raise ConfigurationException("drivers: config parameter is not a dictionary")
    if log:
        log = log.getChild(name)
    return new_fs(name, drivers.get(name, {}), log)
