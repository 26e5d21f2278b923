"""
Tirion configuration object.

.. Licensed under the MIT license, see the LICENSE file.
"""


import os

import flask.config

from . import default_config


class Config(flask.config.Config):
    """
    Dictionary with some extra ways to fill it from files or special
    dictionaries (see `flask.config.Config`) and attribute access to the
    configuration values.

    Initialized with :mod:`tirion.default_config`, then the Python file
    `filename` (if given), then `values`::

        >>> config = Config(API_KEY_ID='abc')
        >>> config.API_KEY_ID
        'abc'
        >>> config.REQUEST_TIMEOUT = 5
        >>> config['REQUEST_TIMEOUT']
        5
    """
    def __init__(self, filename=None, **values):
        # We fix the root_path argument to the current working directory.
        super(Config, self).__init__(os.getcwd())
        self.from_object(default_config)
        if filename:
            self.from_pyfile(filename)
        self.from_mapping(values)

    def __getattr__(self, key):
        # Only configuration values (upper case keys) are exposed, anything
        # else is a regular attribute.
        if key.isupper():
            try:
                return self[key]
            except KeyError:
                pass
        raise AttributeError('{0!r} object has no attribute {1!r}'.format(
            type(self).__name__, key))

    def __setattr__(self, key, value):
        if key.isupper():
            self[key] = value
        else:
            super(Config, self).__setattr__(key, value)
