"""tabrecorder web application."""

import logging

from tabrecorder.config import ConfigManager
from tabrecorder.system.structlog_configurator import configure_structlog
from tabrecorder.web.core.factory import create_app

# Configure logging before anything else imports and creates loggers
config = ConfigManager().load()
configure_structlog(config)

# Requests are logged by StructuredRequestLoggingMiddleware
logging.getLogger("uvicorn.access").disabled = True
logging.getLogger("uvicorn.error").setLevel(logging.INFO)

app = create_app()
