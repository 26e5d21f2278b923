"""
Tirion resource fields.

.. Licensed under the MIT license, see the LICENSE file.
"""


import collections.abc
import datetime

import dateutil.parser

from .errors import TypeMismatchError


class Field(object):
    """
    Base class for resource field definitions.

    A field definition reads its value through the typed property accessors
    of :class:`resources.Resource` and converts values from their Python
    representation to their API representation.
    """
    def __init__(self, key=None, mutable=False, printable=True, doc=None):
        """
        Create a field instance.

        :arg str key: Key by which this field is stored in the API.
        :arg bool mutable: If `True`, field values can be modified.
        :arg bool printable: If `False`, field values are never included in
          string representations of the resource.
        :arg str doc: Documentation string
        """
        #: Key by which this field is stored in the API. By default inherited
        #: from :attr:`name`.
        self.key = key

        #: If `True`, field values can be modified.
        self.mutable = mutable

        #: If `False`, field values are redacted from string output.
        self.printable = printable

        #: Documentation string.
        self.doc = doc

        self._name = None

    @property
    def name(self):
        """
        Name by which this field is available on the resource class.
        """
        return self._name

    @name.setter
    def name(self, value):
        self._name = value
        if self.key is None:
            self.key = self.name

    def get(self, resource):
        """
        Read the field value from `resource` as a Python value.

        This may materialize the resource.
        """
        return self.to_python(resource.get_property(self.key))

    def set(self, resource, value):
        """
        Write a Python value to `resource`, marking the field dirty.
        """
        resource.set_property(self.key, self.from_python(value))

    def to_python(self, value):
        """
        Convert API value to Python value.
        """
        return value

    def from_python(self, value):
        """
        Convert Python value to API value.
        """
        return value


class String(Field):
    def get(self, resource):
        return resource.get_string_property(self.key)


class Integer(Field):
    """
    Integer field. Missing and malformed values read as ``-1``.
    """
    def get(self, resource):
        return resource.get_int_property(self.key)


class Boolean(Field):
    def get(self, resource):
        return resource.get_boolean_property(self.key)


class DateTime(Field):
    def to_python(self, value):
        if value is None or isinstance(value, datetime.datetime):
            return value
        return dateutil.parser.parse(value)

    def from_python(self, value):
        if value is None:
            return None
        return value.isoformat()


class Link(Field):
    """
    Definition for a link to another resource.
    """
    def __init__(self, resource_key, *args, **kwargs):
        """
        :arg str resource_key: Key for the linked resource type.
        """
        self.resource_key = resource_key
        super(Link, self).__init__(*args, **kwargs)

    def get(self, resource):
        """
        Upgrade the link object to a :class:`resources.Resource` instance.

        Modifications of the returned resource should be saved by calling
        :meth:`resources.Resource.save` on that resource.
        """
        return resource.get_resource_property(
            self.key, resource.registry[self.resource_key])

    def from_python(self, value):
        """
        Links are stored as the resource instance itself and serialized as
        an object with only an href when sent to the server.
        """
        return value


class Object(Field):
    """
    Definition for a free-form JSON object.

    The getter returns a copy, so the value must be assigned as a whole for
    changes to be tracked.
    """
    def to_python(self, value):
        if value is None:
            return None
        if not isinstance(value, collections.abc.Mapping):
            raise TypeMismatchError(self.key, dict, type(value), value,
                                    printable=self.printable)
        return dict(value)

    def from_python(self, value):
        if value is None:
            return None
        return dict(value)
