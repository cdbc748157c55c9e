# opsadmin/shared/middleware/exception_middleware.py

"""
Middleware for centralized exception handling.

Intercepts exceptions escaping the application and formats the error
response as ``{"detail", "code", "errors"}``.
"""

import logging
import re
import time
from typing import Callable, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose.exceptions import ExpiredSignatureError, JWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import NoResultFound
from starlette.middleware.base import BaseHTTPMiddleware

from opsadmin.domain.exceptions import DomainException

# Domain exception internal_code -> HTTP status
DOMAIN_STATUS_CODES = {
    "RESOURCE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "TARGET_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_ASSOCIATION_IDS": status.HTTP_400_BAD_REQUEST,
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
    "RESOURCE_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "DATABASE_OPERATION_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(detail: str, code: str, errors: Optional[dict] = None) -> dict:
    return {"detail": detail, "code": code, "errors": errors or {}}


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed body, query or path parameters: 400 with one entry per field.
    """
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors[".".join(loc) or "request"] = error.get("msg", "invalid value")

    logger = getattr(request.app.state, "logger", logging.getLogger("opsadmin")).getChild("errors")
    logger.warning(f"Invalid request: {request.method} {request.url.path} | Fields: {list(errors)}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request data", "INVALID_INPUT", errors),
    )


class AsyncExceptionMiddleware(BaseHTTPMiddleware):
    """
    Centralized exception handling.
    Captures specific exceptions and formats the response accordingly.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None, environment: str = "development"):
        super().__init__(app)
        parent = logger or logging.getLogger("opsadmin")
        self.logger = parent.getChild("errors")
        self.production = environment == "production"

    def _client(self, request: Request) -> str:
        return request.client.host if request.client else "N/A"

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            response.headers["X-Process-Time"] = str(process_time)
            return response

        except DomainException as exc:
            status_code = DOMAIN_STATUS_CODES.get(exc.internal_code, status.HTTP_400_BAD_REQUEST)
            log = self.logger.error if status_code >= 500 else self.logger.warning
            log(
                f"Domain exception: {str(exc)} | Code: {exc.internal_code} | "
                f"Path: {request.url.path}"
            )
            return JSONResponse(
                status_code=status_code,
                content=error_body(str(exc), exc.internal_code, exc.details),
            )

        except IntegrityError as exc:
            constraint_name = self._extract_constraint_name(str(exc))
            error_message = "Database integrity error" if self.production else str(exc)
            self.logger.error(
                f"Integrity error: Type={type(exc).__name__} | "
                f"Constraint={constraint_name or 'N/A'} | "
                f"Path: {request.url.path} | Client: {self._client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content=error_body(
                    error_message,
                    f"INTEGRITY_ERROR{f'_{constraint_name}' if constraint_name else ''}",
                ),
            )

        except NoResultFound as exc:
            self.logger.warning(f"Resource not found: {str(exc)} | Path: {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=error_body("Resource not found", "RESOURCE_NOT_FOUND"),
            )

        except SQLAlchemyError as exc:
            error_message = "Internal database error" if self.production else str(exc)
            self.logger.error(
                f"Database error: Type={type(exc).__name__} | "
                f"Path: {request.url.path} | Client: {self._client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body(error_message, "DATABASE_ERROR"),
            )

        except (JWTError, ExpiredSignatureError) as exc:
            error_type = "Expired token" if isinstance(exc, ExpiredSignatureError) else "Invalid token"
            self.logger.warning(
                f"Authentication error: {error_type} | "
                f"Path: {request.url.path} | Client: {self._client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content=error_body(f"{error_type}. Please login again.", "INVALID_TOKEN"),
            )

        except ValueError as exc:
            self.logger.warning(
                f"Validation error: {str(exc)} | "
                f"Path: {request.url.path} | Client: {self._client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=error_body(str(exc), "VALIDATION_ERROR"),
            )

        except Exception as exc:
            error_message = "Internal server error" if self.production else str(exc)
            self.logger.exception(
                f"Unhandled exception: Type={type(exc).__name__} | "
                f"Path: {request.url.path} | Client: {self._client(request)}"
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body(error_message, "INTERNAL_SERVER_ERROR"),
            )

    def _extract_constraint_name(self, error_message: str) -> Optional[str]:
        """
        Attempts to extract the constraint name from an integrity error message.
        """
        patterns = [
            r'constraint "(.*?)"',
            r'CONSTRAINT (.*?) FOREIGN KEY',
            r'CONSTRAINT `(.*?)`',
            r'UNIQUE constraint failed: (.*)',
            r'violates unique constraint "(.*?)"',
            r'duplicate key value violates unique constraint "(.*?)"'
        ]

        for pattern in patterns:
            match = re.search(pattern, error_message)
            if match:
                return match.group(1)
        return None
