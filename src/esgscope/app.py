from flask import Flask, jsonify

from esgscope.config import config
from esgscope.errors import ConflictError, NotFoundError, ValidationError
from esgscope.logging_setup import configure_logging


def create_app() -> Flask:
    """Application factory."""
    configure_logging()
    app = Flask(__name__)

    if config.seed_on_startup:
        from esgscope.seed import seed_companies

        seed_companies()

    # Register blueprints
    from esgscope.api.companies import bp as companies_bp
    from esgscope.api.mcp import bp as mcp_bp

    app.register_blueprint(companies_bp, url_prefix="/api/companies")
    app.register_blueprint(mcp_bp, url_prefix="/api/mcp")

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        body = {"error": str(e)}
        if e.parameter:
            body["parameter"] = e.parameter
        return jsonify(body), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(ConflictError)
    def handle_conflict(e: ConflictError):
        return jsonify({"error": str(e)}), 409

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    return app
