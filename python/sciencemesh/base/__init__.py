"""
base classes and utilities shared across the ScienceMesh storage packages.
"""

class ScienceMeshException(Exception):
    """
    a base exception for all exceptions raised by the ScienceMesh packages.
    """

    def __init__(self, message: str=None, cause: Exception=None):
        """
        create the exception
        :param str message:    an explanation of the problem
        :param Exception cause:  an exception that is the underlying cause of this one
        """
        if not message:
            if cause:
                message = str(cause)
            else:
                message = "Unknown ScienceMesh error"
        super(ScienceMeshException, self).__init__(message)
        self.cause = cause
