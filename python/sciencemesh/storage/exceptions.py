"""
Customized exceptions that allow code to handle error conditions raised by storage drivers
"""
from sciencemesh.base import ScienceMeshException

class StorageException(ScienceMeshException):
    """
    an exception indicating a problem carrying out a storage operation.

    This class serves as a base class for all exceptions raised by storage drivers.
    """

    def __init__(self, message: str=None, cause: Exception=None):
        if not message:
            message = "Unspecified problem accessing storage"
        super(StorageException, self).__init__(message, cause)


class UserRequired(StorageException):
    """
    an exception indicating that an operation was requested without an authenticated user
    attached to the request context.
    """
    def __init__(self, message: str=None):
        if not message:
            message = "user required"
        super(UserRequired, self).__init__(message)


class NotSupported(StorageException):
    """
    an exception indicating that the requested operation is not supported by the storage driver
    """
    def __init__(self, operation: str=None, message: str=None):
        if not message:
            message = "unimplemented"
            if operation:
                message += f": {operation}"
        super(NotSupported, self).__init__(message)
        self.operation = operation


class StorageServiceError(StorageException):
    """
    an exception indicating an error occurred while accessing a backing storage service endpoint.

    This class serves as a base class for more specific service access errors.
    """

    def __init__(self, message: str=None, ep: str=None, code: int=0, resptext: str=None,
                 cause: Exception=None):
        """
        create the exception

        :param str message:  an explanation of the cause of the error
        :param str ep:       the service endpoint that was being accessed
        :param int code:     the HTTP response code that was returned (if service responded)
        :param str resptext: the erroroneous response body that was returned, as text (if service responded)
        """
        if not message:
            message = "Error accessing storage service"
            if ep:
                message += f" at {ep}"
            if code:
                message += f" ({str(code)})"
            if resptext:
                message += f"; unhandlable response:\n{resptext}"
        super(StorageServiceError, self).__init__(message, cause)
        self.ep = ep
        self.code = code or 0
        self.response = resptext


class StorageCommError(StorageServiceError):
    """
    an error indicating a failure communicating with the remote storage service.  This error
    typically covers network related errors, like failures to connect, dropped connection, DNS
    errors, etc.  Typically, the remote service did not get a chance to respond directly to the
    request.
    """
    def __init__(self, message: str=None, ep: str=None, cause: Exception=None):
        """
        create the exception

        :param str message:  an explanation of the cause of the error
        :param str ep:       the service endpoint that was being accessed
        """
        if not message:
            message = "Storage service communication failure"
            if ep:
                message += f" while accessing {ep}"
        super(StorageCommError, self).__init__(message, ep, cause=cause)


class StorageServerError(StorageServiceError):
    """
    an error indicating a server-side error during a request to the remote storage service.
    This error is typically the fault of the remote server (i.e. code >= 500) and not due to
    improper use of the service by the client.
    """

    def __init__(self, code: int=0, ep: str=None, resptext: str=None, message: str=None):
        if not message:
            message = "Unexpected storage server error"
            if ep:
                message += f" while accessing {ep}"
            if code:
                message += f": HTTP code: {str(code)}"
        super(StorageServerError, self).__init__(message, ep, code, resptext)


class UnexpectedStorageResponse(StorageServerError):
    """
    an error that indicates that the remote storage service responded with unexpected or
    erroneous content.  The code may reflect a successful operation, but the returned content
    cannot be processed (e.g. due to format errors).
    """

    def __init__(self, message: str=None, ep: str=None, resptext: str=None, code: int=0):
        """
        create the exception
        :param str message:  an explanation of the cause of the error
        :param str ep:       the service endpoint that was being accessed
        :param str resptext: the erroroneous response body that was returned, as text
        :param int code:     the HTTP response code that was returned
        """
        if not message:
            message = "Unexpected content returned from storage service"
            if ep:
                message += f" while accessing {ep}"
            if resptext:
                message += f"; unhandlable response:\n{resptext}"
        super(UnexpectedStorageResponse, self).__init__(code, ep, resptext, message)


class StorageClientError(StorageServiceError):
    """
    an error indicating a client-side error during a request to the remote storage service.
    This error typically indicates that the client is using the service improperly, such as
    providing bad input data (i.e. code >= 400, < 500).
    """

    def __init__(self, message: str=None, code: int=0, ep: str=None, resptext: str=None):
        """
        create the exception
        :param str message:  an explanation of the cause of the error
        :param int code:     the HTTP response code that was returned
        :param str ep:       the service endpoint that was being accessed
        :param str resptext: the erroroneous response body that was returned, as text
        """
        if not message:
            message = "Bad request made to storage service"
            if code:
                message += f" ({str(code)})"
            if ep:
                message += f" at {ep}"
        super(StorageClientError, self).__init__(message, ep, code, resptext)


class ResourceNotFound(StorageClientError):
    """
    an error indicating that the resource (file or directory) requested from the storage
    service does not exist.  This exception typically captures a 404 response.
    """

    def __init__(self, ep: str=None, message: str=None, resptext: str=None, code: int=404):
        """
        create the exception
        :param str ep:       the service endpoint that was being accessed
        :param str message:  an explanation of the cause of the error
        :param str resptext: the erroroneous response body that was returned, as text
        :param int code:     the HTTP response code that was returned (default: 404)
        """
        if not message:
            message = "Requested resource not found"
            if ep:
                message += f": {ep}"
        super(ResourceNotFound, self).__init__(message, code, ep, resptext)


class StorageUserUnauthorized(StorageClientError):
    """
    an error indicating that the user represented by the supplied credentials is not authorized
    to access the resource as requested.  This exception typically captures a 401 or 403 response.
    """

    def __init__(self, ep: str=None, message: str=None, resptext: str=None, code: int=403):
        """
        create the exception
        :param str ep:       the service endpoint that was being accessed
        :param str message:  an explanation of the cause of the error
        :param str resptext: the erroroneous response body that was returned, as text
        :param int code:     the HTTP response code that was returned (default: 403)
        """
        if not message:
            message = "User is not authorized for access as requested"
            if ep:
                message += f": {ep}"
        super(StorageUserUnauthorized, self).__init__(message, code, ep, resptext)
