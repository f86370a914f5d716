"""
Request size limiting middleware for FastAPI.
Protects the report endpoints from oversized payloads.
"""
from typing import Any, Dict, Optional, Set
import json
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from costreport.core.config import config

logger = logging.getLogger(__name__)


# Endpoints that require size limiting
PROTECTED_ENDPOINTS: Set[str] = {
    "/api/report",
    "/api/report/summary",
}


def _too_large(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={
            "status": "error",
            "error": "request_too_large",
            "message": message,
        }
    )


class RequestSizeLimiterMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for request size limiting.

    Applies size limits only to configured endpoints.
    Other routes pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_body_size: Optional[int] = None,
        max_projects: Optional[int] = None,
        max_resources_per_project: Optional[int] = None
    ):
        super().__init__(app)
        self.max_body_size = max_body_size or config.MAX_REQUEST_BODY_SIZE
        self.max_projects = max_projects or config.MAX_PROJECTS
        self.max_resources_per_project = max_resources_per_project or config.MAX_RESOURCES_PER_PROJECT

    async def dispatch(self, request: Request, call_next):
        """
        Process request and apply size limits if applicable.

        Args:
            request: FastAPI request object
            call_next: Next middleware or route handler

        Returns:
            Response object
        """
        path = request.url.path

        if path not in PROTECTED_ENDPOINTS:
            return await call_next(request)

        content_length = request.headers.get("Content-Length")
        if content_length:
            try:
                if int(content_length) > self.max_body_size:
                    logger.info(
                        "Request body size exceeded for %s: %s bytes (limit: %d)",
                        path, content_length, self.max_body_size
                    )
                    return _too_large(
                        f"Request body size exceeds allowed limit of {self.max_body_size} bytes."
                    )
            except ValueError:
                # Invalid Content-Length header, the body length is checked below
                pass

        body_bytes = await request.body()

        if len(body_bytes) > self.max_body_size:
            logger.info(
                "Request body size exceeded for %s: %d bytes (limit: %d)",
                path, len(body_bytes), self.max_body_size
            )
            return _too_large(
                f"Request body size exceeds allowed limit of {self.max_body_size} bytes."
            )

        if body_bytes:
            try:
                body_json = json.loads(body_bytes.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                # Invalid JSON - let FastAPI report the validation error
                body_json = None

            if isinstance(body_json, dict):
                validation_error = self._validate_payload(path, body_json)
                if validation_error:
                    logger.info("Payload validation failed for %s: %s", path, validation_error)
                    return _too_large(validation_error)

        return await call_next(request)

    def _validate_payload(self, path: str, body_json: Dict[str, Any]) -> Optional[str]:
        """
        Validate payload-specific constraints based on endpoint.

        Args:
            path: Request path
            body_json: Parsed JSON body

        Returns:
            Error message if validation fails, None if valid
        """
        if path == "/api/report":
            return self._validate_report_request(body_json)

        if path == "/api/report/summary":
            return self._validate_resource_count(body_json.get("resources"), "Summary request")

        return None

    def _validate_report_request(self, body_json: Dict[str, Any]) -> Optional[str]:
        projects = body_json.get("projects")
        if not isinstance(projects, list):
            return None

        if len(projects) > self.max_projects:
            return f"Too many projects: {len(projects)} (limit: {self.max_projects})"

        for project in projects:
            if not isinstance(project, dict):
                continue
            name = project.get("name", "<unnamed>")
            for key in ("resources", "past_resources", "diff"):
                error = self._validate_resource_count(project.get(key), f"Project {name} {key}")
                if error:
                    return error

        return None

    def _validate_resource_count(self, resources: Any, label: str) -> Optional[str]:
        if isinstance(resources, list) and len(resources) > self.max_resources_per_project:
            return (
                f"{label} too large: {len(resources)} resources "
                f"(limit: {self.max_resources_per_project})"
            )
        return None
