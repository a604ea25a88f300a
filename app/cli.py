from __future__ import annotations

import os
from loguru import logger

from app.config import APP_HOST, APP_PORT, APP_RELOAD


def run_server(app_obj):
    """Run the Uvicorn server.

    Reload is off unless APP_RELOAD is set; with reload on uvicorn needs the
    import string instead of the app object.
    """
    import uvicorn

    reload_env = os.environ.get("APP_RELOAD")
    if reload_env is not None:
        reload_flag = reload_env == "1" or reload_env.lower() == "true"
    else:
        reload_flag = APP_RELOAD

    if reload_flag:
        logger.info("Uvicorn reload enabled (development mode).")
        uvicorn.run(
            "app.main:app",
            host=APP_HOST,
            port=APP_PORT,
            reload=True,
        )
    else:
        logger.info("Uvicorn reload disabled (production mode).")
        uvicorn.run(
            app_obj,
            host=APP_HOST,
            port=APP_PORT,
            reload=False,
        )
