"""
Tirion sessions.

A session is the data store resources use to talk to the server over HTTP.

.. Licensed under the MIT license, see the LICENSE file.
"""


import collections
import datetime
import json
import logging
import urllib.parse

import requests

from .config import Config
from .datastore import DataStore
from .errors import (ApiError, BadRequestError, ConflictError, DecodeError,
                     ForbiddenError, NotAcceptableError, NotFoundError,
                     TransportError, UnauthorizedError)
from . import resources


logger = logging.getLogger('tirion')


class SessionMeta(type):
    def __new__(cls, name, parents, attributes):
        """
        Create a new class with accessor methods for all resource types.

        The class should have a tuple of resource classes in its `_resources`
        attribute.
        """
        for resource_class in attributes.get('_resources', ()):
            attributes.update(cls._create_resource_methods(resource_class))

        return super(SessionMeta, cls).__new__(cls, name, parents, attributes)

    @staticmethod
    def _create_resource_methods(resource_class):
        """
        Set accessor methods on this session.

        We explicitely register these methods instead of dynamic dispatching
        with `__getattr__`. This enables tab completion and `dir()` without
        having to implement `__dir__`. We can also attach docstrings this way.
        """
        key = resource_class.key

        def get_reference(self, href):
            """
            Get a reference to a resource of type {key}.

            No request is made until a property other than the href is read.
            Relative hrefs are resolved against the API root.

            :arg str href: Href of the {key}.

            :return: A resource of type {key}.
            :rtype: :class:`.{resource_class.__name__}`
            """
            return self.instantiate(
                resource_class,
                {resources.HREF_PROP_NAME: self._qualified_uri(href)})
        get_reference.__doc__ = get_reference.__doc__.format(
            key=key, resource_class=resource_class)

        methods = {key: get_reference}

        # Only resource types with their own creation arguments get a
        # creation method.
        if 'create' in vars(resource_class):
            def create_resource(self, *args, **kwargs):
                return resource_class.create(self, *args, **kwargs)
            create_resource.__doc__ = resource_class.create.__doc__
            methods['create_%s' % key] = create_resource

        return methods


class AbstractSession(DataStore, metaclass=SessionMeta):
    """
    Abstract session for interfacing the server API.

    Subclasses should have a tuple of resource classes in their `_resources`
    attribute.
    """
    _resources = ()

    def __init__(self, api_root=None, api_key_id=None, api_key_secret=None,
                 config=None, log_level=logging.INFO):
        """
        Create a session.

        :arg api_root: API root endpoint.
        :type api_root: str
        :arg api_key_id: API key identifier.
        :type api_key_id: str
        :arg api_key_secret: API key secret.
        :type api_key_secret: str
        :arg config: Tirion configuration object (`api_root`, `api_key_id`,
          and `api_key_secret` take precedence).
        :type config: config.Config
        :arg log_level: Control the level of log messages you will see. Use
          `log_level=logging.DEBUG` to troubleshoot.
        :type log_level: logging.LOG_LEVEL
        """
        self.config = config or Config()

        if api_root:
            self.config.API_ROOT = api_root
        if api_key_id:
            self.config.API_KEY_ID = api_key_id
        if api_key_secret:
            self.config.API_KEY_SECRET = api_key_secret

        self.set_log_level(log_level)
        self._api_errors = collections.defaultdict(
            lambda: ApiError, {400: BadRequestError,
                               401: UnauthorizedError,
                               403: ForbiddenError,
                               404: NotFoundError,
                               406: NotAcceptableError,
                               409: ConflictError})

    def set_log_level(self, log_level):
        """
        Control the level of log messages you will see.
        """
        logger.setLevel(log_level)

    def _qualified_uri(self, href):
        return urllib.parse.urljoin(self.config.API_ROOT, href)

    def get(self, *args, **kwargs):
        """
        Short for :meth:`request` where `method` is ``GET``.
        """
        return self.request('GET', *args, **kwargs)

    def post(self, *args, **kwargs):
        """
        Short for :meth:`request` where `method` is ``POST``.
        """
        return self.request('POST', *args, **kwargs)

    def request(self, method, href, **kwargs):
        """
        Send HTTP request to server.

        :raises errors.TransportError: The request could not be made.
        :raises errors.ApiError: The server responded with an error status.
        """
        headers = kwargs.pop('headers', {})
        uri = self._qualified_uri(href)
        if 'data' in kwargs:
            kwargs['data'] = json.dumps(kwargs['data'], default=self._encode)
            headers['Content-Type'] = 'application/json'
        headers['Accept'] = 'application/json'
        if self.config.API_KEY_ID:
            kwargs['auth'] = (self.config.API_KEY_ID,
                              self.config.API_KEY_SECRET)
        try:
            response = requests.request(
                method, uri, headers=headers,
                verify=self.config.VERIFY_CERTIFICATE,
                timeout=self.config.REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            logger.warning('Unable to make API request: %s %s (%s)',
                           method, uri, e)
            raise TransportError('Unable to make API request: %s %s'
                                 % (method, uri)) from e
        if 200 <= response.status_code < 300:
            logger.debug('Successful API response: %s %s (%d)', method, uri,
                         response.status_code)
            return response
        logger.warning('Error API response: %s %s (%d)', method, uri,
                       response.status_code)
        self._response_error(response)

    def _response_error(self, response):
        try:
            content = response.json()
            code = content['code']
            message = content['message']
        except (KeyError, TypeError, ValueError):
            code = response.reason
            message = response.text[:78]
        logger.debug('API error code: %s (%s)', code, message)
        raise self._api_errors[response.status_code](response.status_code,
                                                     code, message)

    @staticmethod
    def _encode(value):
        """
        Serialize values the `json` module does not know about.

        Resources are sent as link objects with only their href.
        """
        if isinstance(value, resources.Resource):
            return {resources.HREF_PROP_NAME: value.get_href()}
        if isinstance(value, (datetime.date, datetime.datetime)):
            return value.isoformat()
        raise TypeError('Object of type %s is not JSON serializable'
                        % type(value).__name__)

    @staticmethod
    def _decode(response):
        """
        Property dictionary from the response body.

        :raises errors.DecodeError: The body is not a JSON object.
        """
        try:
            properties = response.json()
        except ValueError:
            raise DecodeError('Response body is not valid JSON: %s'
                              % response.url)
        if not isinstance(properties, dict):
            raise DecodeError('Response body is not a JSON object: %s'
                              % response.url)
        return properties

    def fetch(self, href, resource_class):
        href = self._qualified_uri(href)
        properties = self._decode(self.get(href))
        properties[resources.HREF_PROP_NAME] = href
        return self.instantiate(resource_class, properties)

    def save(self, resource):
        """
        Save the dirty properties of `resource` and reload it from the
        response. Properties changed while the request is in progress stay
        dirty.

        :raises ValueError: The resource is new, use :meth:`create` instead.
        """
        if resource.is_new():
            raise ValueError('Cannot save a new resource, create it first')
        dirty_properties = resource.dirty_properties
        if not dirty_properties:
            return
        response = self.post(resource.get_href(), data=dirty_properties)
        resource.merge_saved_properties(dirty_properties,
                                        self._decode(response))

    def create(self, parent_href, resource):
        """
        Create the new `resource` in the collection at `parent_href` and
        reload it from the response.

        :raises ValueError: The resource already exists.
        """
        if not resource.is_new():
            raise ValueError('Resource already exists: %s'
                             % resource.get_href())
        response = self.post(parent_href, data=resource.properties)
        resource.replace_properties(self._decode(response))
        return resource

    def delete(self, resource):
        if resource.is_new():
            raise ValueError('Cannot delete a new resource')
        self.request('DELETE', resource.get_href())


class Session(AbstractSession):
    """
    Session for interfacing the server API.

    Example session::

        >>> session = Session(api_key_id='id', api_key_secret='secret')
        >>> account = session.account('https://api.example.com/v1/accounts/1')
        >>> account.is_materialized()
        False
        >>> account.email
        'user@example.com'
        >>> account.is_materialized()
        True
        >>> account.surname = 'Smith'
        >>> account.is_dirty()
        True
        >>> account.save()
        >>> account.is_dirty()
        False
    """
    _resources = (resources.Account,
                  resources.ApiKey,
                  resources.Application,
                  resources.Directory,
                  resources.Group,
                  resources.Tenant)
