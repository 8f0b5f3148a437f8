"""Exceptions raised by the ONTAP driver.

Each exception carries a printf-style ``message`` template that is filled
with the keyword arguments given to the constructor.
"""

import logging

LOG = logging.getLogger(__name__)


class OntapDriverException(Exception):
    """Base ONTAP driver exception."""

    message = "An unknown exception occurred."

    def __init__(self, message=None, **kwargs):
        self.kwargs = kwargs

        if message is None:
            try:
                message = self.message % kwargs
            except (KeyError, TypeError):
                LOG.exception('Exception in string format operation:')
                for name, value in kwargs.items():
                    LOG.error("%(name)s: %(value)s",
                              {'name': name, 'value': value})
                message = self.message
        elif isinstance(message, Exception):
            message = str(message)

        self.msg = message
        super(OntapDriverException, self).__init__(message)


class InvalidConfiguration(OntapDriverException):
    message = "Invalid ONTAP driver configuration: %(reason)s"


class OntapApiError(OntapDriverException):
    message = "ONTAP API request %(action)s failed: %(reason)s"

    def __init__(self, message=None, status_code=None, **kwargs):
        self.status_code = status_code
        super(OntapApiError, self).__init__(message, **kwargs)


class VolumeNotFound(OntapDriverException):
    message = "Volume %(volume_name)s could not be found."


class IscsiServiceLookupError(OntapDriverException):
    message = "Problem retrieving iSCSI services: %(reason)s"


class TargetIQNNotFound(OntapDriverException):
    message = "No iSCSI service found for SVM %(svm)s."
