"""
Tirion, a Python client library for an identity and account management
REST service.

.. Licensed under the MIT license, see the LICENSE file.
"""


from .session import Session


# We follow a versioning scheme compatible with setuptools [1] where the
# package version is always that of the upcoming release (and not that of the
# previous release), post-fixed with ``.dev``. Only in a release commit, the
# ``.dev`` is removed (and added again in the next commit).
#
# [1] http://peak.telecommunity.com/DevCenter/setuptools#specifying-your-project-s-version


__version_info__ = ('0', '1', '0', 'dev')
__date__ = '17 Oct 2026'


__version__ = '.'.join(__version_info__)
__author__ = 'Tirion contributors'
__contact__ = 'tirion@example.com'
__homepage__ = 'https://example.com/tirion'


# Set default logging handler to avoid "No handler found" warnings.
import logging
logging.getLogger('tirion').addHandler(logging.NullHandler())
