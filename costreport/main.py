"""
Main FastAPI application bootstrap.
Configures middleware and includes routers.
"""
import logging

from fastapi import FastAPI

from costreport.core.config import config
from costreport.api.report import router as report_router
from costreport.middleware.request_size_limiter import RequestSizeLimiterMiddleware


logger = logging.getLogger(__name__)

# Validate configuration on startup
try:
    config.validate()
except ValueError as error:
    raise RuntimeError(f"Configuration error: {error}") from error

logger.info(
    "Cost report service starting: output version %s, supported providers %s",
    config.OUTPUT_VERSION,
    ",".join(config.SUPPORTED_PROVIDER_PREFIXES)
)


app = FastAPI(
    title="Cost Report",
    description="Rolls priced infrastructure resources up into diffable cost reports",
)

app.add_middleware(RequestSizeLimiterMiddleware)

app.include_router(report_router)
