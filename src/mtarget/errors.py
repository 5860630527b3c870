""" Exceptions raised internally by :mod:`mtarget`, and the error strings
    that are handed back to callers in their place. None of the exceptions
    defined here escape a public :class:`mtarget.Target` method; they are
    caught at the operation boundary and turned into default content, None,
    or one of the error strings below, depending on the operation.
"""

NO_CLIENT_CODE = 'Missing client code'
OPTED_OUT = 'Privacy status is opted out'
NO_PREFETCH_REQUESTS = 'Empty or null prefetch requests list'
NO_CONNECTION = 'Unable to open connection'
NULL_RESPONSE_JSON = 'Null response Json'
ERROR_RESPONSE = 'Errors returned in Target response: '
NOTIFICATION_ERROR_TAG = 'Notification'
NO_PREFETCH_MBOXES = 'No prefetch mbox content in Target response'
MBOX_NAME_NULL_OR_EMPTY = 'MboxName is either null or empty'
MBOX_NAMES_NULL_OR_EMPTY = 'List of Mbox names is either null or empty'
NO_TARGET_REQUESTS = 'No valid Target Request found.'
REQUEST_GENERATION_FAILED = 'Failed to generate the Target request payload'
DISPLAY_NOTIFICATION_NOT_SENT = 'No display notifications are available to send'
CLICK_NOTIFICATION_NOT_SENT = 'No click notification is available to send'
NO_CLICK_METRICS = 'No click metrics set on mbox: %s'
REQUEST_TIMEOUT = 'Target request timed out'


class TargetError(Exception):
    """ Base class for every error raised by the engine. The string form of
        the exception is the message delivered to callers that expect an
        error string.
    """


class ConfigurationError(TargetError):
    """ The client code is missing, or the configuration is otherwise
        unusable; no network call is made.
    """

    def __init__(self, message=NO_CLIENT_CODE):
        TargetError.__init__(self, message)


class PrivacyError(TargetError):
    """ The privacy status does not permit sending anything.
    """

    def __init__(self, message=OPTED_OUT):
        TargetError.__init__(self, message)


class NetworkError(TargetError):
    """ The request could not be sent, or no usable response came back.
    """


class NetworkTimeout(NetworkError):
    pass


class ProtocolError(NetworkError):
    """ The response body could not be decoded as a delivery API document.
    """


class ServerError(TargetError):
    """ The response carried a top-level error message. The string form of
        the exception is the message exactly as returned by the server.
    """

    def __init__(self, message):
        TargetError.__init__(self, str(message))
        self.message = str(message)


    def is_notification_error(self):
        return NOTIFICATION_ERROR_TAG in str(self.message)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
