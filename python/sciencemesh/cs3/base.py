"""
the base class for CS3 message types.

A CS3 message is a simple record whose properties are declared via the class's ``_fields``
list.  Each entry is a :py:class:`Field` giving the attribute name, the property name used in
its JSON encoding, and (optionally) the type of the value:  another :py:class:`Message`
subclass, an ``IntEnum`` subclass, or ``None`` for plain JSON values (str, int, bool, dict, list).

The JSON encoding mirrors that produced by the Go bindings to the CS3 APIs:  properties holding
a "zero" value (None, "", 0, False, empty dict/list) are omitted, while a sub-message that is set
is always encoded, even if all of its own properties are zero (i.e. as ``{}``).
"""
import json
from collections import OrderedDict, namedtuple
from collections.abc import Mapping
from enum import IntEnum

Field = namedtuple("Field", "attr prop type default".split())
Field.__new__.__defaults__ = (None, None)

def _is_zero(val):
    return val is None or (not isinstance(val, Message) and not val)

class Message(object):
    """
    a base class for CS3 message types (see module documentation).
    """
    _fields = []

    def __init__(self, **kwargs):
        for f in self._fields:
            val = kwargs.pop(f.attr, None)
            if val is None:
                val = f.default() if callable(f.default) else f.default
            setattr(self, f.attr, val)
        if kwargs:
            raise TypeError("%s: unexpected properties: %s" %
                            (type(self).__name__, ", ".join(kwargs.keys())))

    def to_dict(self) -> Mapping:
        """
        return a dictionary describing this message that can be converted to JSON directly via
        the json module.  Properties with zero values are left out.
        """
        out = OrderedDict()
        for f in self._fields:
            val = getattr(self, f.attr)
            if _is_zero(val):
                continue
            if isinstance(val, Message):
                val = val.to_dict()
            elif isinstance(val, IntEnum):
                val = int(val)
            elif isinstance(val, (list, tuple)):
                val = [v.to_dict() if isinstance(v, Message) else v for v in val]
            out[f.prop] = val
        return out

    def serialize(self, indent=None) -> str:
        """
        serialize this message to a JSON string
        :param int indent:  use the given value as the desired indentation.  If None, the output will
                            include no newline characters (and thus no indentation)
        """
        kw = {}
        if indent:
            kw['indent'] = indent
        return json.dumps(self.to_dict(), **kw)

    @classmethod
    def from_dict(cls, data: Mapping):
        """
        convert a dictionary like that created by :py:meth:`to_dict` into an instance of this
        class.  Missing properties are given their default values.
        :raises ValueError:  if ``data`` (or a value within it) has the wrong shape
        """
        if data is None:
            return None
        if not isinstance(data, Mapping):
            raise ValueError("%s.from_dict(): data is not an object: %s" % (cls.__name__, repr(data)))

        kw = {}
        for f in cls._fields:
            if f.prop not in data or data[f.prop] is None:
                continue
            val = data[f.prop]
            if isinstance(f.type, type) and issubclass(f.type, Message):
                if isinstance(val, (list, tuple)):
                    val = [f.type.from_dict(v) for v in val]
                else:
                    val = f.type.from_dict(val)
            elif isinstance(f.type, type) and issubclass(f.type, IntEnum):
                val = f.type(val)
            kw[f.attr] = val
        return cls(**kw)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, f.attr) == getattr(other, f.attr) for f in self._fields)

    def __repr__(self):
        props = ", ".join("%s=%r" % (f.attr, getattr(self, f.attr))
                          for f in self._fields if not _is_zero(getattr(self, f.attr)))
        return "%s(%s)" % (type(self).__name__, props)
