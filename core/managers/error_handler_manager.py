from flask import jsonify
from werkzeug.exceptions import HTTPException

from core.exceptions import DomainError


class ErrorHandlerManager:
    def __init__(self, app):
        self.app = app

    def register_error_handlers(self):
        @self.app.errorhandler(DomainError)
        def handle_domain_error(e):
            self.app.logger.info("%s: %s", e.__class__.__name__, e.message)
            return jsonify(e.to_dict()), e.status_code

        @self.app.errorhandler(HTTPException)
        def handle_http_error(e):
            return jsonify({"error": e.name, "message": e.description}), e.code

        @self.app.errorhandler(500)
        def handle_internal_error(e):
            self.app.logger.error("Internal Server Error: %s", e)
            return jsonify({"error": "Internal Server Error", "message": "Unexpected error"}), 500
