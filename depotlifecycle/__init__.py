import os
import logging
from flask import Flask, redirect, url_for
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig, TestConfig

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()

CONFIGS = {
    'development': DevConfig,
    'production': ProdConfig,
    'testing': TestConfig,
}


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """Application factory with environment based configuration."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    os.makedirs(app.instance_path, exist_ok=True)

    # Pick configuration
    env = config_name or os.getenv('ENV') or os.getenv('FLASK_ENV') or 'production'
    app.config.from_object(CONFIGS.get(env, ProdConfig))
    if overrides:
        app.config.update(overrides)

    # Initialise logging
    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    db.init_app(app)
    migrate.init_app(app, db)

    # Ensure models loaded so tables can be created
    from depotlifecycle import models  # noqa
    with app.app_context():
        db.create_all()

    @app.route('/')
    def index():
        return redirect(url_for('releases.index_release'))

    from depotlifecycle.errors import register_error_handlers
    from depotlifecycle.releases.routes import bp as releases_bp
    from depotlifecycle.estimates.routes import bp as estimates_bp
    from depotlifecycle.openapi import bp as docs_bp
    from depotlifecycle.cli import depot_cli

    register_error_handlers(app)
    app.register_blueprint(releases_bp, url_prefix='/api/v2/release')
    app.register_blueprint(estimates_bp, url_prefix='/api/v2/estimate')
    app.register_blueprint(docs_bp, url_prefix='/api/v2')
    app.cli.add_command(depot_cli)

    return app
