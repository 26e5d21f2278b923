import os
from setuptools import setup
import sys

if sys.version_info < (3, 7):
    raise Exception('Tirion requires Python 3.7 or higher.')

install_requires = ['python-dateutil', 'requests', 'Flask']

# httpretty does not mock socket.shutdown, which urllib3>=2.3 calls.
tests_require = ['pytest', 'httpretty', 'urllib3<2.3']

try:
    with open('README.rst') as readme:
        long_description = readme.read()
except IOError:
    long_description = 'Tirion, a Python client library for an identity ' \
                       'and account management REST service.'

# This is quite the hack, but we don't want to import our package from here
# since that's recipe for disaster (it might have some uninstalled
# dependencies, or we might import another already installed version).
distmeta = {}
for line in open(os.path.join('tirion', '__init__.py')):
    try:
        field, value = (x.strip() for x in line.split('='))
    except ValueError:
        continue
    if field == '__version_info__':
        value = value.strip('[]()')
        value = '.'.join(x.strip(' \'"') for x in value.split(','))
    else:
        value = value.strip('\'"')
    distmeta[field] = value

setup(
    name='tirion',
    version=distmeta['__version_info__'],
    description='A Python client library for an identity and account '
    'management REST service',
    long_description=long_description,
    author=distmeta['__author__'],
    author_email=distmeta['__contact__'],
    url=distmeta['__homepage__'],
    license='MIT License',
    platforms=['any'],
    packages=['tirion'],
    install_requires=install_requires,
    extras_require={'test': tests_require},
    classifiers = [
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP',
        ],
    keywords='identity accounts rest client'
)
