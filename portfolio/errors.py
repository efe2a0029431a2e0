import traceback

from flask import current_app, jsonify

from portfolio.utils.helpers import now_iso


class APIError(Exception):
    """Raised inside a handler; rendered as the JSON error envelope."""

    def __init__(self, status, message, error_code=None, details=None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.error_code = error_code
        self.details = details


def not_found(resource):
    return APIError(404, f'{resource.capitalize()} not found', f'{resource.upper().replace(" ", "_")}_NOT_FOUND')


def error_response(status, message, error_code=None, details=None):
    body = {'success': False, 'message': message}
    if error_code:
        body['error_code'] = error_code
    if details is not None:
        body['details'] = details
    body['timestamp'] = now_iso()
    return jsonify(body), status


def internal_error_response(exc):
    details = {'name': type(exc).__name__, 'message': str(exc)}
    if current_app.config.get('EXPOSE_ERROR_DETAILS'):
        details['stack'] = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error_response(500, 'Internal server error', 'INTERNAL_SERVER_ERROR', details)
