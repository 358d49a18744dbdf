"""CORS configuration for the cookie-carrying auth API."""

import logging
import re
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "https://localhost:3000",
    "http://127.0.0.1:3000",
]
DEFAULT_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
DEFAULT_HEADERS = ["authorization", "content-type", "x-csrf-token", "x-xsrf-token"]


class CORSConfigurationError(Exception):
    """Raised when CORS configuration is invalid or insecure."""

    pass


def normalize_origin(origin: str) -> str:
    """Strip whitespace and trailing slashes from an origin URL.

    Raises:
        CORSConfigurationError: If origin is empty or not an absolute URL.

    """
    origin = origin.strip()

    if not origin:
        raise CORSConfigurationError("Origin cannot be empty")

    if origin == "*":
        return origin

    parsed = urlparse(origin)
    if not parsed.scheme or not parsed.netloc:
        raise CORSConfigurationError(f"Invalid origin URL: {origin}")

    return origin.rstrip("/")


def parse_comma_separated_list(value: str | list[str] | None) -> list[str]:
    """Parse a comma-separated string (or list) into a list of trimmed values."""
    if value is None:
        return []

    if isinstance(value, list):
        return [v.strip() for v in value if v.strip()]

    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]

    raise CORSConfigurationError(f"Invalid value type: {type(value)}")


class CORSConfiguration:
    """Environment-aware CORS settings.

    The refresh token travels in an HTTP-only cookie, so browsers only send it
    cross-origin when credentials are allowed. Credentials are therefore on by
    default and wildcard origins are rejected whenever they are enabled.
    """

    def __init__(
        self,
        allow_origins: str | list[str] | None = None,
        allow_origin_regex: str | None = None,
        allow_credentials: bool = True,
        max_age: int = 600,
        environment: str = "development",
    ):
        self.environment = environment.lower()
        self.allow_credentials = allow_credentials
        self.max_age = max_age
        self.allow_methods = list(DEFAULT_METHODS)
        self.allow_headers = list(DEFAULT_HEADERS)

        self.allow_origins = [normalize_origin(o) for o in parse_comma_separated_list(allow_origins)]
        self.origin_regex: re.Pattern[str] | None = None
        if allow_origin_regex:
            try:
                self.origin_regex = re.compile(allow_origin_regex)
            except re.error as exc:
                raise CORSConfigurationError(f"Invalid regex pattern: {allow_origin_regex}") from exc

        self._validate_security_rules()

    def _validate_security_rules(self) -> None:
        has_wildcard = "*" in self.allow_origins
        has_explicit_origins = bool(self.allow_origins) and not has_wildcard

        if self.allow_credentials and has_wildcard:
            raise CORSConfigurationError(
                "Cannot enable credentials with wildcard origins (*). Provide explicit allowed origins instead."
            )

        if has_wildcard and self.environment != "development":
            raise CORSConfigurationError(f"Wildcard origins (*) are not allowed in {self.environment} environment.")

        if self.environment == "production" and not has_explicit_origins and self.origin_regex is None:
            raise CORSConfigurationError("Production environment requires explicit allowed origins.")

    def get_middleware_config(self) -> dict:
        """Keyword arguments for Starlette's CORSMiddleware."""
        return {
            "allow_origins": self.allow_origins,
            "allow_origin_regex": self.origin_regex.pattern if self.origin_regex else None,
            "allow_credentials": self.allow_credentials,
            "allow_methods": self.allow_methods,
            "allow_headers": self.allow_headers,
            "max_age": self.max_age,
        }

    def log_configuration(self) -> None:
        logger.info(
            f"CORS configuration ({self.environment}): origins={self.allow_origins}, "
            f"regex={'enabled' if self.origin_regex else 'disabled'}, credentials={self.allow_credentials}"
        )

    @staticmethod
    def for_development(
        allow_origins: str | list[str] | None = None,
        allow_credentials: bool = True,
    ) -> "CORSConfiguration":
        return CORSConfiguration(
            allow_origins=allow_origins if allow_origins is not None else DEFAULT_DEV_ORIGINS,
            allow_credentials=allow_credentials,
            environment="development",
        )

    @staticmethod
    def for_staging(allow_origins: str | list[str]) -> "CORSConfiguration":
        if not allow_origins:
            raise CORSConfigurationError("Staging environment requires explicit allowed origins")

        return CORSConfiguration(allow_origins=allow_origins, environment="staging")

    @staticmethod
    def for_production(
        allow_origins: str | list[str],
        allow_origin_regex: str | None = None,
    ) -> "CORSConfiguration":
        if not allow_origins and not allow_origin_regex:
            raise CORSConfigurationError("Production environment requires explicit allowed origins")

        return CORSConfiguration(
            allow_origins=allow_origins,
            allow_origin_regex=allow_origin_regex,
            max_age=3600,
            environment="production",
        )
