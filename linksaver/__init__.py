from flask import Flask

from linksaver.api import api_bp
from linksaver.auth import auth_bp
from linksaver.config import Config
from linksaver.extensions import db, login_manager, migrate
from linksaver.services.themes import THEMES
from linksaver.services.views import FILTER_BAR_TAGS, SIDEBAR_TAGS
from linksaver.web import web_bp


def create_app(config_object=Config):
    app = Flask(__name__, template_folder="../templates")
    app.config.from_object(config_object)
    app.logger.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized LinkSaver database.")

    @app.context_processor
    def inject_globals():
        return {
            "app_name": "LinkSaver",
            "filter_bar_tags": FILTER_BAR_TAGS,
            "sidebar_tags": SIDEBAR_TAGS,
            "themes": THEMES,
        }

    with app.app_context():
        db.create_all()

    return app
