"""
Error types raised by the rental operations.

Each error is a werkzeug HTTP exception so a single Flask error handler can
render it as ``{"error": description}`` with the matching status code.
``DeliveryError`` is the exception to this rule: it is raised by the mailer
and is only ever logged by its callers.
"""

from werkzeug.exceptions import BadRequest, InternalServerError, NotFound


class ValidationError(BadRequest):
    description = 'Invalid request'


class CarUnavailable(BadRequest):
    description = 'Car is not available'


class DuplicateError(BadRequest):
    description = 'Phone, license number, or email already exists'


class CarNotFound(NotFound):
    description = 'Car not found'


class UserNotFound(NotFound):
    description = 'User not found'


class RentalNotFound(NotFound):
    description = 'Rental not found'


class PersistenceError(InternalServerError):
    description = 'Database error'


class DeliveryError(Exception):
    """A single notification could not be delivered."""
