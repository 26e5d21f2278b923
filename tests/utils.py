"""
Utilities for Tirion unit tests.
"""


import copy
import json

import httpretty

from tirion import Session
from tirion.config import Config
from tirion.datastore import DataStore
from tirion.errors import NotFoundError


class StubDataStore(DataStore):
    """
    In-memory data store recording all calls, with resource documents keyed
    by href.
    """
    def __init__(self, documents=None, on_fetch=None, on_save=None):
        self.documents = documents or {}
        self.on_fetch = on_fetch
        self.on_save = on_save
        self.fetches = []
        self.instantiations = []
        self.saves = []

    def fetch(self, href, resource_class):
        self.fetches.append(href)
        if self.on_fetch is not None:
            self.on_fetch(href)
        if href not in self.documents:
            raise NotFoundError(404, 404, 'Resource not found: %s' % href)
        return resource_class(self, copy.deepcopy(self.documents[href]))

    def instantiate(self, resource_class, properties=None):
        self.instantiations.append((resource_class, properties))
        return super(StubDataStore, self).instantiate(resource_class,
                                                      properties)

    def save(self, resource):
        self.saves.append(resource.get_href())
        sent = resource.dirty_properties
        document = self.documents.setdefault(resource.get_href(), {})
        document.update(sent)
        if self.on_save is not None:
            self.on_save(resource.get_href())
        resource.merge_saved_properties(sent, copy.deepcopy(document))

    def create(self, parent_href, resource):
        href = '%s/%d' % (parent_href, len(self.documents) + 1)
        document = dict(resource.properties, href=href)
        self.documents[href] = document
        resource.replace_properties(copy.deepcopy(document))
        return resource

    def delete(self, resource):
        del self.documents[resource.get_href()]


class TestEnvironment(object):
    """
    Test class providing a session with HTTP requests mocked by httpretty.
    """
    api_root = 'http://tirion.test/v1/'

    def setup_method(self):
        httpretty.reset()
        httpretty.enable(allow_net_connect=False)

        config = Config(API_ROOT=self.api_root,
                        API_KEY_ID='test-id',
                        API_KEY_SECRET='test-secret')
        self.session = Session(config=config)

    def teardown_method(self):
        httpretty.disable()
        httpretty.reset()

    def uri(self, path):
        """
        Absolute href for `path` relative to the API root.
        """
        return self.api_root + path

    def register(self, method, path, body=None, status=200, raw=None):
        """
        Mock a JSON response to `method` requests on `path`.
        """
        if raw is None:
            raw = json.dumps(body) if body is not None else ''
        httpretty.register_uri(method, self.uri(path), body=raw,
                               status=status,
                               content_type='application/json')

    def requests(self):
        return httpretty.latest_requests()
