"""
Tirion custom exceptions.

.. Licensed under the MIT license, see the LICENSE file.
"""


class TransportError(Exception):
    """
    A request to the API could not be completed.
    """


class ApiError(TransportError):
    """
    The API responded with an error status.
    """
    def __init__(self, status, code, message):
        self.status = status
        self.code = code
        self.message = message
        super(ApiError, self).__init__(status, code, message)


class BadRequestError(ApiError):
    pass


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class NotAcceptableError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class DecodeError(Exception):
    """
    A response body is not a well-formed resource document.
    """


class TypeMismatchError(TypeError):
    """
    A resource property value does not have the requested type.
    """
    def __init__(self, key, expected, actual, value=None, printable=True):
        self.key = key
        self.expected = expected
        self.actual = actual
        message = ("'%s' property value type does not match the specified "
                   "type. Specified type: %s. Existing type: %s"
                   % (key, expected.__name__, actual.__name__))
        if printable:
            message += '. Value: %s' % (value,)
        super(TypeMismatchError, self).__init__(message)
