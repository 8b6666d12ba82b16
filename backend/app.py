import logging
from typing import Any, Dict, Optional

from flask import Flask
from flask_cors import CORS
from extensions import limiter
from config import Config
from colorrules import color_rules_bp
from colorrules.kv_store import KeyValueStoreFactory, RuleStorage
from colorrules.routes import STORAGE_EXTENSION_KEY


def create_app(config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    CORS(app, resources={r"/api/*": {"origins": app.config['ALLOWED_ORIGINS']}})

    limiter.init_app(app)

    store = KeyValueStoreFactory.get_store(app.config['STORE_BACKEND'], db_path=app.config['DB_PATH'])
    app.extensions[STORAGE_EXTENSION_KEY] = RuleStorage(store, app.config['APP_NAME'])

    app.register_blueprint(color_rules_bp)
    return app


app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=False)
