"""
Unit tests for :mod:`tirion.session`.
"""


import json

import httpretty
import pytest
import requests

from tirion import resources, session as session_module
from tirion.errors import (ApiError, ConflictError, DecodeError,
                           NotFoundError, TransportError)

import utils


ACCOUNT = {'href': 'http://tirion.test/v1/accounts/1',
           'email': 'jdoe@example.com',
           'givenName': 'John',
           'surname': 'Doe',
           'directory': {'href': 'http://tirion.test/v1/directories/3'}}


class TestSession(utils.TestEnvironment):
    def test_reference(self):
        """
        Get a reference to an account without any request.
        """
        account = self.session.account(ACCOUNT['href'])
        assert isinstance(account, resources.Account)
        assert account.get_href() == ACCOUNT['href']
        assert not account.is_materialized()
        assert self.requests() == []

    def test_get_account(self):
        """
        Reading a field of a reference fetches the account once.
        """
        self.register(httpretty.GET, 'accounts/1', ACCOUNT)
        account = self.session.account(ACCOUNT['href'])
        assert account.email == 'jdoe@example.com'
        assert account.surname == 'Doe'
        assert len(self.requests()) == 1

        request = httpretty.last_request()
        assert request.method == 'GET'
        assert request.headers['Authorization'].startswith('Basic ')
        assert request.headers['Accept'] == 'application/json'

    def test_fetch(self):
        self.register(httpretty.GET, 'accounts/1', ACCOUNT)
        account = self.session.fetch(ACCOUNT['href'], resources.Account)
        assert account.is_materialized()
        assert account.given_name == 'John'

    def test_relative_href(self):
        """
        Relative hrefs are resolved against the API root.
        """
        self.register(httpretty.GET, 'accounts/1', ACCOUNT)
        account = self.session.account('accounts/1')
        assert account.get_href() == self.uri('accounts/1')
        assert account.email == 'jdoe@example.com'
        assert account.get_href() == self.uri('accounts/1')

    def test_fetch_relative_href(self):
        self.register(httpretty.GET, 'accounts/1',
                      dict(ACCOUNT, href='accounts/1'))
        account = self.session.fetch('accounts/1', resources.Account)
        assert account.get_href() == self.uri('accounts/1')

    def test_save_relative_href(self):
        """
        Saving a reference made from a relative href keeps its href.
        """
        self.register(httpretty.POST, 'accounts/1',
                      dict(ACCOUNT, surname='Smith'))
        account = self.session.account('accounts/1')
        account.surname = 'Smith'
        account.save()
        assert account.get_href() == self.uri('accounts/1')
        assert not account.is_dirty()
        assert account.surname == 'Smith'

    def test_linked_directory(self):
        """
        Follow a link from an account to its directory.
        """
        self.register(httpretty.GET, 'accounts/1', ACCOUNT)
        self.register(httpretty.GET, 'directories/3',
                      {'href': self.uri('directories/3'),
                       'name': 'Employees'})
        account = self.session.account(ACCOUNT['href'])
        directory = account.directory
        assert isinstance(directory, resources.Directory)
        assert account.directory is directory
        assert directory.name == 'Employees'
        assert not account.is_dirty()
        assert len(self.requests()) == 2

    def test_save(self):
        """
        Saving sends only the dirty properties and reloads the account.
        """
        self.register(httpretty.GET, 'accounts/1', ACCOUNT)
        self.register(httpretty.POST, 'accounts/1',
                      dict(ACCOUNT, surname='Smith', fullName='John Smith'))
        account = self.session.account(ACCOUNT['href'])
        account.surname = 'Smith'
        account.save()

        request = httpretty.last_request()
        assert request.method == 'POST'
        assert request.headers['Content-Type'] == 'application/json'
        assert json.loads(request.body) == {'surname': 'Smith'}
        assert not account.is_dirty()
        assert account.full_name == 'John Smith'
        assert all(r.method == 'POST' for r in self.requests())

    def test_save_link(self):
        """
        Resources in saved properties are sent as links.
        """
        self.register(httpretty.POST, 'groups/5',
                      {'href': self.uri('groups/5'), 'name': 'g'})
        group = self.session.group(self.uri('groups/5'))
        directory = self.session.directory(self.uri('directories/3'))
        group.set_property('directory', directory)
        group.save()
        assert json.loads(httpretty.last_request().body) == {
            'directory': {'href': self.uri('directories/3')}}

    def test_save_new(self):
        account = resources.Account(self.session)
        account.email = 'a@b'
        with pytest.raises(ValueError):
            self.session.save(account)

    def test_save_clean(self):
        account = self.session.account(ACCOUNT['href'])
        self.session.save(account)
        assert self.requests() == []

    def test_create_account(self):
        """
        Create an account in a directory.
        """
        self.register(httpretty.POST, 'directories/3/accounts',
                      dict(ACCOUNT, password=None), status=201)
        directory = self.session.directory(self.uri('directories/3'))
        account = self.session.create_account(
            directory, 'jdoe@example.com', 'secret', 'John', 'Doe')

        assert json.loads(httpretty.last_request().body) == {
            'email': 'jdoe@example.com',
            'password': 'secret',
            'givenName': 'John',
            'surname': 'Doe'}
        assert account.get_href() == ACCOUNT['href']
        assert not account.is_dirty()
        assert account.is_materialized()
        assert 'secret' not in str(account)
        assert all(r.method == 'POST' for r in self.requests())

    def test_create_existing(self):
        account = self.session.account(ACCOUNT['href'])
        with pytest.raises(ValueError):
            self.session.create(self.uri('accounts'), account)

    def test_delete(self):
        self.register(httpretty.DELETE, 'accounts/1', status=204)
        account = self.session.account(ACCOUNT['href'])
        account.delete()
        assert httpretty.last_request().method == 'DELETE'

    def test_not_found(self):
        """
        Error responses are raised as API errors.
        """
        self.register(httpretty.GET, 'accounts/1',
                      {'status': 404, 'code': 404,
                       'message': 'The requested resource does not exist.'},
                      status=404)
        account = self.session.account(ACCOUNT['href'])
        with pytest.raises(NotFoundError) as excinfo:
            account.email
        assert excinfo.value.status == 404
        assert excinfo.value.code == 404
        assert excinfo.value.message == ('The requested resource does not '
                                         'exist.')
        assert isinstance(excinfo.value, TransportError)
        assert not account.is_materialized()

    def test_conflict(self):
        self.register(httpretty.POST, 'accounts/1',
                      {'code': 2001, 'message': 'Email already in use.'},
                      status=409)
        account = self.session.account(ACCOUNT['href'])
        account.email = 'taken@example.com'
        with pytest.raises(ConflictError):
            account.save()
        assert account.is_dirty()

    def test_unknown_error(self):
        """
        Error responses without an error document.
        """
        self.register(httpretty.GET, 'accounts/1', raw='Bad gateway',
                      status=502)
        account = self.session.account(ACCOUNT['href'])
        with pytest.raises(ApiError) as excinfo:
            account.email
        assert excinfo.value.status == 502
        assert excinfo.value.message == 'Bad gateway'

    def test_invalid_json(self):
        self.register(httpretty.GET, 'accounts/1', raw='<html></html>')
        account = self.session.account(ACCOUNT['href'])
        with pytest.raises(DecodeError):
            account.email

    def test_not_an_object(self):
        self.register(httpretty.GET, 'accounts/1', ['a', 'b'])
        account = self.session.account(ACCOUNT['href'])
        with pytest.raises(DecodeError):
            account.email

    def test_transport_error(self, monkeypatch):
        """
        Connection failures are raised as transport errors.
        """
        def fail(*args, **kwargs):
            raise requests.ConnectionError('Connection refused')

        monkeypatch.setattr(session_module.requests, 'request', fail)
        account = self.session.account(ACCOUNT['href'])
        with pytest.raises(TransportError):
            account.email
        assert not account.is_materialized()

    def test_session_arguments(self):
        """
        Constructor arguments take precedence over the configuration.
        """
        session = session_module.Session(api_root='http://other.test/',
                                         api_key_id='abc',
                                         api_key_secret='xyz')
        assert session.config.API_ROOT == 'http://other.test/'
        assert session.config.API_KEY_ID == 'abc'
        assert session.config.API_KEY_SECRET == 'xyz'

    def test_accessors(self):
        """
        Only resource types with creation arguments get a creation method.
        """
        for key in ('account', 'api_key', 'application', 'directory',
                    'group', 'tenant'):
            assert callable(getattr(self.session, key))
        assert hasattr(self.session, 'create_account')
        assert hasattr(self.session, 'create_group')
        assert not hasattr(self.session, 'create_tenant')
        assert not hasattr(self.session, 'create_api_key')
