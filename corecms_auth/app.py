# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import atexit

from flask import Flask

from corecms_auth.infrastructure.container import Container, container as default_container
from corecms_auth.infrastructure.db import init_db
from corecms_auth.interfaces.http.exchange import bind_exchange
from corecms_auth.shared.config import load_config
from corecms_auth.shared.logging import logger, setup_logging
from corecms_auth.shared.middleware.error_handler import (
    configure_error_handling,
    configure_security_headers,
)
from corecms_auth.shared.middleware.request_logger import configure_request_logging


def create_app(container: Container | None = None) -> Flask:
    config = load_config()
    container = container or default_container

    setup_logging(config.log_level, debug_mode=config.debug_logging)
    init_db()

    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.secret_key)

    configure_error_handling(app)
    configure_request_logging(app)
    configure_security_headers(app)
    bind_exchange(app)

    app.register_blueprint(container.auth_controller.as_blueprint())
    app.extensions["corecms_auth.engine"] = container.session_engine

    atexit.register(container.token_reaper.shutdown)

    logger.info(
        f"Flask app initialized cookie={container.auth_config.cookie_name} "
        f"lifetime={container.auth_config.session_lifetime}"
    )
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
