# opsadmin/shared/middleware/logging_middleware.py

"""
Middleware for HTTP request logging.
"""

import logging
import time
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class AsyncRequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each received request and the response sent for it.
    Query strings are omitted in production.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None, environment: str = "development"):
        super().__init__(app)
        parent = logger or logging.getLogger("opsadmin")
        self.logger = parent.getChild("http")
        self.production = environment == "production"

    async def dispatch(self, request: Request, call_next):
        if self.production:
            self.logger.info(f"Request: {request.method} {request.url.path}")
        else:
            query_params = dict(request.query_params)
            self.logger.info(
                f"Request: {request.method} {request.url.path} | "
                f"Query: {query_params if query_params else 'N/A'} | "
                f"Client: {request.client.host if request.client else 'N/A'}"
            )

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        if self.production:
            self.logger.info(f"Response: {response.status_code} for {request.method} {request.url.path}")
        else:
            self.logger.info(
                f"Response: {response.status_code} for {request.method} {request.url.path} | "
                f"Time: {process_time:.4f}s"
            )

        return response
