# depotlifecycle/errors.py
"""Exception types and the app-wide exception -> JSON response mapping.

Business-rule violations (bad input, create of an existing record, update of
a missing one) are client errors and answer 400 with code ``ERR000``.  Faults
raised by the database are store errors and answer 500; they are never
reported as a bad request.  Every handler rolls back the session so a failed
request leaves no half-written parties behind.
Any other unexpected fault answers 500 with code ``ERR999``, and every
remaining HTTP error answers a ``{"message": ...}`` body.
"""

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from depotlifecycle import db

VALIDATION_ERROR_CODE = 'ERR000'
STORE_ERROR_CODE = 'ERR500'
SERVER_ERROR_CODE = 'ERR999'


class ValidationFailure(ValueError):
    """Invalid argument: malformed input or a create/update precondition failed."""


def register_error_handlers(app):
    @app.errorhandler(ValidationFailure)
    def on_validation_failure(ex):
        db.session.rollback()
        logging.info("\tError - 400 - Bad Request: %s", ex)
        return jsonify(code=VALIDATION_ERROR_CODE, message=str(ex)), 400

    @app.errorhandler(SQLAlchemyError)
    def on_store_failure(ex):
        db.session.rollback()
        logging.exception("\tError - 500 - Store failure")
        return jsonify(code=STORE_ERROR_CODE, message='Internal storage error'), 500

    @app.errorhandler(404)
    def not_found(_):
        db.session.rollback()
        logging.info("\tError - 404 - Not Found")
        return jsonify(message='Not Found'), 404

    @app.errorhandler(401)
    def unauthorized(_):
        logging.info("\tError - 401 - Unauthorized")
        resp = jsonify(message='Unauthorized')
        resp.status_code = 401
        resp.headers['WWW-Authenticate'] = 'Basic realm="depot-lifecycle"'
        return resp

    @app.errorhandler(501)
    def not_implemented(_):
        logging.info("\tError - 501 - Not Implemented")
        return jsonify(message='this feature is not supported by this server'), 501

    @app.errorhandler(503)
    def paused(_):
        logging.info("\tError - 503 - Service Unavailable")
        return jsonify(message='API is temporarily paused, and not accepting any activity'), 503

    @app.errorhandler(500)
    def server_error(_):
        db.session.rollback()
        logging.exception("\tError - 500 - Internal Server Error")
        return jsonify(code=SERVER_ERROR_CODE, message='Internal server error'), 500

    @app.errorhandler(HTTPException)
    def http_error(ex):
        db.session.rollback()
        logging.info("\tError - %s - %s", ex.code, ex.name)
        resp = jsonify(message=ex.name)
        resp.status_code = ex.code
        for name, value in ex.get_headers():
            if name.lower() != 'content-type':
                resp.headers[name] = value
        return resp
