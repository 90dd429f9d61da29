from __future__ import annotations

import logging

from flask import Flask
from flask_cors import CORS

from tippool.api.routes import api_bp
from tippool.config import Config


def create_app() -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",") if o.strip()]
    CORS(app, origins=origins or "*")

    app.register_blueprint(api_bp)
    return app
