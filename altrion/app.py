# altrion/app.py
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from .api.routes import bp
from .api.portfolio import bp as portfolio_bp
from .services.storage import get_backend
from .utils.config import settings
from .utils.logging import get_logger
from .domain.errors import AppError

log = get_logger(__name__)

def create_app(backend=None):
    app = Flask(__name__)
    app.config["ALTRION_BACKEND"] = backend if backend is not None else get_backend()
    app.config["ALTRION_CONNECTIONS"] = {}

    app.register_blueprint(bp)
    app.register_blueprint(portfolio_bp)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "env": settings.ENV})

    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        log.warning(f"AppError: {err.message}")
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        log.exception("Unhandled error")
        return jsonify({"error": "internal_error"}), 500

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=settings.PORT, debug=settings.ENV == "dev")
