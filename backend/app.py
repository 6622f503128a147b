# backend/app.py

import logging
import os
from datetime import timedelta

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from . import db
from .categories import categories_bp
from .errors import ApiError
from .transactions import transactions_bp
from .users import users_bp

# ---------------- Configuration ----------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("expense-tracker")

API_PREFIX = "/api/v1"
DB_PATH = os.environ.get("DB_PATH", os.path.join(os.path.dirname(__file__), "..", "data", "expense.db"))
DEFAULT_CORS_ORIGINS = "http://localhost:8501,http://127.0.0.1:8501,http://localhost:3000"


def load_config():
    """Settings from the environment with development defaults."""
    cors_origins = os.environ.get('CORS_ORIGINS', DEFAULT_CORS_ORIGINS)
    return {
        'JWT_SECRET_KEY': os.environ.get('JWT_SECRET_KEY', "dev-key-for-local-use-only"),
        'JWT_ACCESS_TOKEN_EXPIRES': timedelta(days=int(os.environ.get('JWT_EXPIRES_DAYS', 30))),
        'DB_PATH': DB_PATH,
        'CORS_ORIGINS': [o.strip() for o in cors_origins.split(",") if o.strip()],
        'API_PREFIX': API_PREFIX,
    }


def register_jwt_callbacks(jwt):
    """Render every token failure as a 401 with a message body."""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({"message": f"Not authorized, {reason}"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({"message": f"Invalid token, login again ({reason})"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"message": "Token expired, login again"}), 401


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error")
        return jsonify({"message": str(e) or e.__class__.__name__}), 500


# ---------------- Flask App Factory ----------------
def create_app(test_config=None):
    app = Flask(__name__)

    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)

    jwt = JWTManager(app)
    register_jwt_callbacks(jwt)

    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}}, supports_credentials=True)

    prefix = app.config['API_PREFIX']
    app.register_blueprint(users_bp, url_prefix=f"{prefix}/users")
    app.register_blueprint(categories_bp, url_prefix=f"{prefix}/categories")
    app.register_blueprint(transactions_bp, url_prefix=f"{prefix}/transactions")

    register_error_handlers(app)

    db.init_db(app.config['DB_PATH'])
    app.teardown_appcontext(db.close_db)

    @app.route('/')
    def root():
        return jsonify({"message": "Expense tracker API", "version": prefix})

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app


# ---------------- Run ----------------
if __name__ == '__main__':
    app = create_app()
    app.run(host=os.environ.get('HOST', '0.0.0.0'), port=int(os.environ.get('PORT', 5000)), debug=False)
