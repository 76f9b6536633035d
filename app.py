from flask import Flask, jsonify, send_from_directory
from dotenv import load_dotenv
import logging
import os

load_dotenv()

from config import Config  # noqa: E402  (load_dotenv needs to run first)
from extensions import db, login_manager  # noqa: E402  (load_dotenv needs to run first)
from errors import register_error_handlers  # noqa: E402
from logging_config import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)


def create_app(config_class=Config) -> Flask:
    """Application factory for the GearGuard API."""

    app = Flask(__name__)
    app.config.from_object(config_class)
    setup_logging(app)

    # init extensions
    db.init_app(app)
    login_manager.init_app(app)

    # blueprints
    from modules.auth import bp as auth_bp
    from modules.users import bp as users_bp
    from modules.teams import bp as teams_bp
    from modules.equipment import bp as equipment_bp
    from modules.requests import bp as requests_bp
    from modules.notifications import bp as notifications_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(teams_bp)
    app.register_blueprint(equipment_bp)
    app.register_blueprint(requests_bp)
    app.register_blueprint(notifications_bp)

    register_error_handlers(app)

    # DB
    with app.app_context():
        # models must be imported before create_all()
        import models  # noqa: F401
        from modules.teams import models as teams_models  # noqa: F401
        from modules.equipment import models as equipment_models  # noqa: F401
        from modules.requests import models as requests_models  # noqa: F401
        from modules.notifications import models as notifications_models  # noqa: F401

        db.create_all()

    # uploads dir
    upload_folder = app.config.get("UPLOAD_FOLDER", "uploads")
    os.makedirs(upload_folder, exist_ok=True)

    @app.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(os.path.abspath(upload_folder), filename)

    @app.route("/")
    def index():
        return jsonify(message="GearGuard API is running")

    logger.info("GearGuard started (env=%s)", app.config.get("APP_ENV"))
    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
