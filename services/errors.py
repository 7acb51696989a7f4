"""
Service-layer error taxonomy.

Every service operation signals failure by raising one of these; nothing
continues after a raise. ``app.register_error_handlers`` turns them into JSON
responses using ``status_code`` and ``code``.
"""


class ServiceError(Exception):
    """Base class for failures reported to API callers."""

    status_code = 400
    code = 'Error'
    retryable = False
    default_message = 'Request failed.'

    def __init__(self, msg=None, status_code=None, fields=None):
        super().__init__(msg or self.default_message)
        self.msg = msg or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.fields = fields or {}

    def to_dict(self):
        body = {'code': self.code, 'msg': self.msg}
        if self.fields:
            body['fields'] = self.fields
        if self.retryable:
            body['retryable'] = True
        return body


class NotFound(ServiceError):
    """Email or identity lookup missed."""
    code = 'NotFound'
    default_message = 'Account with that email address does not exist.'


class AlreadyLinkedOrPending(ServiceError):
    code = 'AlreadyLinkedOrPending'
    default_message = "Account you're trying to add is already your family member or has a pending request."


class AlreadyExists(ServiceError):
    code = 'AlreadyExists'
    default_message = 'Account with that email address already exists.'


class ValidationError(ServiceError):
    """Missing or malformed input; ``fields`` maps field name to message."""
    code = 'ValidationError'
    default_message = 'Invalid input.'


class Unauthorized(ServiceError):
    status_code = 401
    code = 'Unauthorized'
    default_message = 'Unauthorized user!'


class PersistenceFailure(ServiceError):
    """Store unavailable or write conflict. Safe to retry."""
    status_code = 503
    code = 'PersistenceFailure'
    retryable = True
    default_message = 'The request could not be saved. Please try again.'


class PartialUpdate(ServiceError):
    """A family link was found with only one of its two sides."""
    status_code = 409
    code = 'PartialUpdate'
    retryable = True
    default_message = 'Family link is out of sync. Please try again.'
