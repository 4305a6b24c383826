"""
a storage driver that uses a Nextcloud instance as its backing store.

The Nextcloud instance must be running the ScienceMesh app, which exposes a per-user REST API
under ``{end_point}~{username}/api/``.  The driver is registered under the name "nextcloud" and
can be created via :py:func:`sciencemesh.storage.registry.new_fs`:

.. code-block::

   fs = new_fs("nextcloud", {"end_point": "https://nc.example.org/apps/sciencemesh/"})

Setting the ``mock_http`` configuration parameter to True directs the driver to an in-memory
simulation of the service (see :py:mod:`~sciencemesh.storage.nextcloud.mock`), useful for
testing and demonstrations.
"""
from collections.abc import Mapping
from logging import Logger

from .driver import NextcloudStorageDriver, parse_config
from ..registry import register

def new_driver(config: Mapping, log: Logger=None) -> NextcloudStorageDriver:
    """
    create a Nextcloud storage driver from its configuration
    """
    return NextcloudStorageDriver(config, log)

register("nextcloud", new_driver)
