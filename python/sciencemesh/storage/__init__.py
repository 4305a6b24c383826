"""
support for accessing storage via CS3-compatible storage drivers.

This package includes the following components:

:py:mod:`base`
    the abstract storage driver interface, :py:class:`~sciencemesh.storage.base.FS`
:py:mod:`ctx`
    the per-request :py:class:`~sciencemesh.storage.ctx.Context` carrying the requesting user
:py:mod:`registry`
    instantiation of drivers by name
:py:mod:`nextcloud`
    a driver that forwards every operation to a Nextcloud instance over HTTP
:py:mod:`cmd`
    the ``ncfs`` command-line tool

Drivers are typically created from configuration via :py:func:`open_storage`:

.. code-block::

   fs = open_storage({"driver": "nextcloud",
                      "drivers": {"nextcloud": {"end_point": "https://nc.example.org/apps/sciencemesh/"}}})
   info = fs.get_md(Context(user), Reference(path="/docs/report.pdf"))
"""
from .exceptions import *
from .ctx import Context, get_user, get_logger
from .base import FS
from .registry import register, registered, new_fs, open_storage

# register the built-in drivers
from . import nextcloud

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"
