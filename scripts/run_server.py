#!/usr/bin/env python
"""
Serve the recipe AI API.

Run manually:
    python scripts/run_server.py
"""
import logging
import os

import uvicorn

from recipe_ai.app.core.config import get_settings

logger = logging.getLogger("run_server")


def main():
    settings = get_settings()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting recipe AI server on %s:%s", host, port)
    uvicorn.run("recipe_ai.app.main:app", host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
