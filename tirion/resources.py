"""
Tirion resources.

A resource is a client-side handle to an entity on the server, identified
by its href. Resources are lazy: a resource known only by its href is a
reference, and its other properties are fetched through the data store the
first time one of them is read.

.. Licensed under the MIT license, see the LICENSE file.
"""


import collections.abc
import logging
import numbers
import re

from .errors import TypeMismatchError
from .fields import Boolean, DateTime, Field, Integer, Link, Object, String
from .locking import ReadWriteLock


#: Property holding the resource identity.
HREF_PROP_NAME = 'href'

#: Values for the `status` field of most resources.
STATUSES = ('ENABLED', 'DISABLED')

#: Strings accepted as integer property values.
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


logger = logging.getLogger('tirion')


def has_text(value):
    """
    `True` if `value` is not `None` and not blank when converted to a string.
    """
    return value is not None and bool(str(value).strip())


def freeze(value):
    """
    Hashable equivalent of a property value.

        >>> freeze({'a': [1, 2]}) == freeze({'a': [1, 2]})
        True
    """
    if isinstance(value, collections.abc.Mapping):
        return frozenset((k, freeze(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(v) for v in value)
    return value


class ResourceMeta(type):
    #: Resource classes by their key.
    registry = {}

    def __new__(cls, name, parents, attributes):
        """
        Create a new class with field getters and setters.

        Similar to `how Django model fields work
        <https://code.djangoproject.com/wiki/DevModelCreation>`, this sets up
        getters and setters on resource classes. The field values live in the
        property bag of the resource.
        """
        fields = set()

        # Inherit all fields from parent classes.
        fields.update(*[parent._fields for parent in parents
                        if isinstance(parent, ResourceMeta)])

        for name_, attribute in list(attributes.items()):
            if not isinstance(attribute, Field):
                continue

            # Store the name under which the field is available on the class
            # in the field itself.
            attribute.name = name_
            fields.add(attribute)

            if attribute.mutable:
                attributes[name_] = property(cls._getter(attribute),
                                             cls._setter(attribute),
                                             doc=attribute.doc)
            else:
                attributes[name_] = property(cls._getter(attribute),
                                             doc=attribute.doc)

        attributes['_fields'] = fields
        attributes['_unprintable'] = frozenset(
            field.key for field in fields if not field.printable)

        resource_class = super(ResourceMeta, cls).__new__(
            cls, name, parents, attributes)
        if attributes.get('key'):
            cls.registry[attributes['key']] = resource_class
        return resource_class

    @staticmethod
    def _getter(field):
        def getter_for_field(self):
            return field.get(self)
        return getter_for_field

    @staticmethod
    def _setter(field):
        def setter_for_field(self, value):
            field.set(self, value)
        return setter_for_field


class Resource(object, metaclass=ResourceMeta):
    """
    Base class for representing server resources.

    Resource fields are defined as class attributes by :mod:`Field` instances.
    All state lives in two insertion-ordered property bags: the local view of
    the resource and the overlay of dirty properties awaiting a save. Both
    are guarded by a read/write lock, which is never held while talking to
    the data store.
    """
    #: Key for this resource type.
    key = None

    #: Resource classes by their key.
    registry = ResourceMeta.registry

    #: Resource href.
    href = String(doc='Resource href.')

    def __init__(self, data_store, properties=None):
        """
        Create a representation for a server resource from a dictionary.

        :arg data_store: Data store the resource is attached to.
        :type data_store: :class:`.DataStore`
        :arg properties: Dictionary with property values (using API keys and
          values). A dictionary with only an href creates a reference, no
          dictionary at all creates a new resource.
        :type properties: dict
        """
        #: The data store this resource is attached to as
        #: :class:`.DataStore <DataStore>`.
        self.data_store = data_store

        self._lock = ReadWriteLock()
        self._properties = {}
        self._dirty_properties = {}
        self._materialized = False
        self._dirty = False

        self.replace_properties(properties)

    @classmethod
    def create(cls, data_store, parent_href, values=None):
        """
        Create a new resource on the server and return a representation for
        it.

        :arg data_store: Data store to create the resource with.
        :type data_store: :class:`.DataStore`
        :arg str parent_href: Href of the collection to create the resource
          in.
        :arg values: Dictionary with field values (using Python names and
          values).
        :type values: dict

        Every subclass should override this with an informative docstring.
        """
        fields = {field.name: field for field in cls._fields}

        resource = cls(data_store)
        for name, value in (values or {}).items():
            fields[name].set(resource, value)

        data_store.create(parent_href, resource)
        return resource

    def replace_properties(self, properties):
        """
        Replace all properties and reset the dirty state.

        A resource with no properties is new, a resource with only an href is
        a reference, and anything else counts as materialized.
        """
        properties = dict(properties or {})
        with self._lock.write_lock:
            current = self._properties.get(HREF_PROP_NAME)
            if (has_text(current) and
                    properties.get(HREF_PROP_NAME) != current):
                raise ValueError('Cannot change href of resource: %s'
                                 % current)
            self._properties.clear()
            self._dirty_properties.clear()
            self._dirty = False
            self._properties.update(properties)
            href_only = (len(properties) == 1 and
                         HREF_PROP_NAME in properties)
            self._materialized = bool(properties) and not href_only

    def get_href(self):
        """
        Href of this resource, or `None` for a new resource. This never
        materializes the resource.
        """
        return self.get_string_property(HREF_PROP_NAME)

    def is_new(self):
        """
        `True` if this resource has no href yet, `False` otherwise.
        """
        # Not going through get_href, which would try to materialize.
        return not has_text(self._read_property(HREF_PROP_NAME))

    def is_materialized(self):
        """
        `True` if the property bag holds a full server representation.
        """
        with self._lock.read_lock:
            return self._materialized

    def is_dirty(self):
        """
        `True` if there are any unsaved changes on this resource, `False`
        otherwise.
        """
        with self._lock.read_lock:
            return self._dirty

    @property
    def properties(self):
        """
        Copy of all known properties.
        """
        with self._lock.read_lock:
            return dict(self._properties)

    @property
    def dirty_properties(self):
        """
        Copy of the properties awaiting a save.
        """
        with self._lock.read_lock:
            return dict(self._dirty_properties)

    def property_names(self):
        """
        Names of all known properties, in insertion order.
        """
        with self._lock.read_lock:
            return list(self._properties)

    def materialize(self):
        """
        Fetch the full representation of this resource from the server.

        Dirty properties are applied on top of the fetched properties, so
        pending changes survive. The href of this resource is kept, even if
        the server spells it differently.

        :raises ValueError: The resource is new.
        """
        href = self.get_href()
        if not has_text(href):
            raise ValueError('Cannot materialize a resource without href')

        logger.debug('Materializing %s resource: %s',
                     self.__class__.__name__, href)
        resource = self.data_store.fetch(href, self.__class__)
        properties = resource.properties

        with self._lock.write_lock:
            current = self._properties.get(HREF_PROP_NAME)
            self._properties.clear()
            self._properties.update(properties)
            self._properties[HREF_PROP_NAME] = current
            self._properties.update(self._dirty_properties)
            self._materialized = True

    def merge_saved_properties(self, sent, properties):
        """
        Install the server representation returned by saving the dirty
        properties `sent`.

        Properties changed since `sent` was taken stay dirty and are applied
        on top of `properties`. The href of this resource is kept.
        """
        properties = dict(properties or {})
        with self._lock.write_lock:
            href = self._properties.get(HREF_PROP_NAME)
            pending = {key: value
                       for key, value in self._dirty_properties.items()
                       if key not in sent or sent[key] != value}
            self._properties.clear()
            self._properties.update(properties)
            self._properties[HREF_PROP_NAME] = href
            self._properties.update(pending)
            self._dirty_properties.clear()
            self._dirty_properties.update(pending)
            self._dirty = bool(pending)
            self._materialized = len(self._properties) > 1

    def get_property(self, name):
        """
        Value of property `name`, or `None` if it has no value.

        Reading any property other than the href of an unmaterialized
        reference materializes it, unless the property is dirty.
        """
        if name != HREF_PROP_NAME and not self.is_new():
            if not self.is_materialized():
                with self._lock.read_lock:
                    present = name in self._dirty_properties
                if not present:
                    self.materialize()

        return self._read_property(name)

    def _read_property(self, name):
        with self._lock.read_lock:
            return self._properties.get(name)

    def set_property(self, name, value, dirty=True):
        """
        Set property `name` to `value`.

        :arg bool dirty: If `False`, the property is not marked for saving.
          This is meant for swapping a value for an equivalent one, such as a
          link object for its resource instance.

        :raises ValueError: Attempt to change the href of a resource which
          already has one.
        """
        with self._lock.write_lock:
            if name == HREF_PROP_NAME:
                current = self._properties.get(HREF_PROP_NAME)
                if has_text(current) and value != current:
                    raise ValueError('Cannot change href of resource: %s'
                                     % current)
            self._properties[name] = value
            if dirty or name in self._dirty_properties:
                self._dirty_properties[name] = value
                self._dirty = True

    def get_string_property(self, key):
        value = self.get_property(key)
        if value is None:
            return None
        return str(value)

    def get_int_property(self, key):
        """
        Value of property `key` as an integer.

        Strings are parsed and other numbers are truncated. Missing values and
        values that cannot be parsed give ``-1``, so these cases cannot be
        told apart from a real ``-1``.
        """
        value = self.get_property(key)
        if isinstance(value, str):
            return self._parse_int(value)
        if (isinstance(value, numbers.Real) and
                not isinstance(value, bool)):
            try:
                return int(value)
            except (ValueError, OverflowError):
                logger.error('Unable to convert %r into an integer value. '
                             'Defaulting to -1', value)
        return -1

    def _parse_int(self, value):
        if INTEGER_PATTERN.fullmatch(value):
            return int(value)
        logger.error("Unable to parse string '%s' into an integer value. "
                     "Defaulting to -1", value)
        return -1

    def get_boolean_property(self, key):
        """
        Value of property `key` as a boolean, or `None` if it has no boolean
        value. The strings ``true`` and ``false`` are accepted in any case.
        """
        value = self.get_property(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return {'true': True, 'false': False}.get(value.lower())
        return None

    def get_resource_property(self, key, resource_class):
        """
        Value of property `key` as a resource of type `resource_class`.

        A link or embedded resource object is turned into a resource instance,
        which replaces the object in the property bag without making this
        resource dirty. Subsequent calls return the same instance.

        :raises errors.TypeMismatchError: The value is neither an instance of
          `resource_class` nor a non-empty object.
        """
        value = self.get_property(key)
        if value is None:
            return None
        if isinstance(value, resource_class):
            return value
        if isinstance(value, collections.abc.Mapping) and value:
            resource = self.data_store.instantiate(resource_class, value)
            self.set_property(key, resource, dirty=False)
            return resource

        raise TypeMismatchError(key, resource_class, type(value), value,
                                printable=self.is_printable_property(key))

    def is_printable_property(self, name):
        """
        `True` if the value of property `name` is safe to include in string
        output, `False` otherwise.
        """
        return name not in self._unprintable

    def save(self):
        """
        Save any unsaved changes on this resource.
        """
        if self.is_dirty():
            self.data_store.save(self)

    def delete(self):
        """
        Delete this resource from the server.
        """
        self.data_store.delete(self)

    def to_string(self):
        with self._lock.read_lock:
            return ', '.join('%s: %s' % (key, value)
                             for key, value in self._properties.items()
                             if self.is_printable_property(key))

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        with self._lock.read_lock:
            values = ''.join(' %s=%r' % (key, value)
                             for key, value in self._properties.items()
                             if self.is_printable_property(key))
        return '<%s%s>' % (self.__class__.__name__, values)

    def __hash__(self):
        with self._lock.read_lock:
            if not self._properties:
                return 0
            return hash(freeze(self._properties))

    def __eq__(self, other):
        if self is other:
            return True
        if other is None or type(other) is not type(self):
            return False
        # Fixed lock order so two threads comparing the same pair in opposite
        # directions cannot deadlock.
        first, second = sorted((self, other), key=id)
        with first._lock.read_lock:
            with second._lock.read_lock:
                return self._properties == other._properties


class Tenant(Resource):
    """
    Class for representing a tenant resource.
    """
    key = 'tenant'

    name = String(doc='Human readable tenant name.')
    tenant_key = String(key='key', doc='Unique tenant key.')
    custom_data = Object(key='customData', mutable=True,
                         doc='Free-form tenant data.')


class Application(Resource):
    """
    Class for representing an application resource.
    """
    key = 'application'

    name = String(mutable=True, doc='Human readable application name.')
    description = String(mutable=True, doc='Application description.')
    status = String(mutable=True, doc='One of :data:`STATUSES`.')
    tenant = Link('tenant',
                  doc='Application is owned by this :class:`Tenant`.')

    @classmethod
    def create(cls, data_store, name, description=None, status=None):
        """
        Create an application resource.

        :arg str name: Human readable application name.
        :arg str description: Application description.
        :arg str status: Application status (one of :data:`STATUSES`).

        :return: An application resource.
        :rtype: :class:`.Application`
        """
        values = {'name': name}
        if description is not None:
            values.update(description=description)
        if status is not None:
            values.update(status=status)
        return super(Application, cls).create(data_store, '/applications',
                                              values=values)


class Directory(Resource):
    """
    Class for representing a directory resource.
    """
    key = 'directory'

    name = String(mutable=True, doc='Human readable directory name.')
    description = String(mutable=True, doc='Directory description.')
    status = String(mutable=True, doc='One of :data:`STATUSES`.')
    tenant = Link('tenant', doc='Directory is owned by this :class:`Tenant`.')

    @classmethod
    def create(cls, data_store, name, description=None):
        """
        Create a directory resource.

        :arg str name: Human readable directory name.
        :arg str description: Directory description.

        :return: A directory resource.
        :rtype: :class:`.Directory`
        """
        values = {'name': name}
        if description is not None:
            values.update(description=description)
        return super(Directory, cls).create(data_store, '/directories',
                                            values=values)


class Group(Resource):
    """
    Class for representing a group resource.
    """
    key = 'group'

    name = String(mutable=True, doc='Human readable group name.')
    description = String(mutable=True, doc='Group description.')
    status = String(mutable=True, doc='One of :data:`STATUSES`.')
    directory = Link('directory',
                     doc='Group is part of this :class:`Directory`.')
    tenant = Link('tenant', doc='Group is owned by this :class:`Tenant`.')

    @classmethod
    def create(cls, data_store, directory, name, description=None):
        """
        Create a group resource.

        :arg directory: Directory to create the group in.
        :type directory: :class:`.Directory`
        :arg str name: Human readable group name.
        :arg str description: Group description.

        :return: A group resource.
        :rtype: :class:`.Group`
        """
        values = {'name': name}
        if description is not None:
            values.update(description=description)
        return super(Group, cls).create(
            data_store, '%s/groups' % directory.get_href(), values=values)


class Account(Resource):
    """
    Class for representing an account resource.
    """
    key = 'account'

    username = String(mutable=True, doc='Login name.')
    email = String(mutable=True, doc='Email address.')
    password = String(mutable=True, printable=False,
                      doc='Password used for authentication (write only).')
    given_name = String(key='givenName', mutable=True, doc='Given name.')
    middle_name = String(key='middleName', mutable=True, doc='Middle name.')
    surname = String(mutable=True, doc='Surname.')
    full_name = String(key='fullName', doc='Full name.')
    status = String(mutable=True, doc='One of :data:`STATUSES`.')
    login_count = Integer(key='loginCount',
                          doc='Number of successful logins.')
    email_verified = Boolean(key='emailVerified',
                             doc='If `True`, the email address is verified.')
    custom_data = Object(key='customData', mutable=True,
                         doc='Free-form account data.')
    created_at = DateTime(key='createdAt',
                          doc='Date and time this account was created.')
    modified_at = DateTime(key='modifiedAt',
                           doc='Date and time this account was modified.')
    directory = Link('directory',
                     doc='Account is part of this :class:`Directory`.')
    tenant = Link('tenant', doc='Account is owned by this :class:`Tenant`.')

    @classmethod
    def create(cls, data_store, directory, email, password, given_name,
               surname, username=None):
        """
        Create an account resource.

        :arg directory: Directory to create the account in.
        :type directory: :class:`.Directory`
        :arg str email: Email address.
        :arg str password: Password used for authentication.
        :arg str given_name: Given name.
        :arg str surname: Surname.
        :arg str username: Login name (the server defaults to `email`).

        :return: An account resource.
        :rtype: :class:`.Account`
        """
        values = {'email': email,
                  'password': password,
                  'given_name': given_name,
                  'surname': surname}
        if username is not None:
            values.update(username=username)
        return super(Account, cls).create(
            data_store, '%s/accounts' % directory.get_href(), values=values)


class ApiKey(Resource):
    """
    Class for representing an API key resource.
    """
    key = 'api_key'

    key_id = String(key='id', doc='API key identifier.')
    secret = String(printable=False, doc='API key secret.')
    status = String(mutable=True, doc='One of :data:`STATUSES`.')
    account = Link('account', doc='API key belongs to this :class:`Account`.')
    tenant = Link('tenant', doc='API key is owned by this :class:`Tenant`.')
