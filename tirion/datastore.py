"""
Tirion data store contract.

Resources only ever talk to the server through a data store. A data store
is shared by many resources and must be safe to use from several threads.
It never keeps references to the resources it hands out.

.. Licensed under the MIT license, see the LICENSE file.
"""


class DataStore(object):
    """
    Abstract data store.
    """
    def fetch(self, href, resource_class):
        """
        Retrieve a resource from the server.

        :arg str href: Resource href.
        :arg resource_class: Concrete resource class to instantiate.
        :type resource_class: type

        :return: A materialized resource of type `resource_class`.

        :raises errors.TransportError: The request failed.
        :raises errors.DecodeError: The response body is not a resource
          document.
        """
        raise NotImplementedError()

    def instantiate(self, resource_class, properties=None):
        """
        Create a resource of type `resource_class` wrapping `properties`
        without talking to the server.
        """
        return resource_class(self, properties)

    def save(self, resource):
        """
        Write the dirty properties of `resource` to the server and reset its
        dirty state.
        """
        raise NotImplementedError()

    def create(self, parent_href, resource):
        """
        Create the new `resource` on the server under the collection at
        `parent_href`.
        """
        raise NotImplementedError()

    def delete(self, resource):
        """
        Delete `resource` from the server.
        """
        raise NotImplementedError()
