"""Gateway error hierarchy, each error carrying its HTTP status and type string."""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for every error the gateway reports to a client."""

    status_code: int = 500
    error_type: str = "internal_error"
    _logged_to_db: bool = True

    def should_log_to_db(self) -> bool:
        """Whether the error belongs in the request log.

        Expected rejections (rate limit, concurrency, budget, queue timeout)
        are too frequent to audit one by one.
        """
        return self._logged_to_db

    def is_deployment_failure(self) -> bool:
        """Whether the error is a deployment failure that will not heal by itself."""
        return False


class AuthError(GatewayError):
    status_code = 401
    error_type = "authentication_error"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Authentication failed: {detail}")
        self.detail = detail


class RateLimitExceeded(GatewayError):
    """A rate limit was hit; ``limit_type`` names which one."""

    status_code = 429
    _logged_to_db = False

    def __init__(self, message: str, limit_type: str, retry_after_secs: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.limit_type = limit_type
        self.retry_after_secs = retry_after_secs
        self.error_type = limit_type


class ConcurrencyExceeded(GatewayError):
    status_code = 429
    error_type = "concurrency_exceeded"
    _logged_to_db = False

    def __init__(self, limit: int, message: str) -> None:
        super().__init__(f"Concurrency limit exceeded: {message}")
        self.limit = limit
        self.message = message


class ModelNotFound(GatewayError):
    status_code = 404
    error_type = "model_not_found"

    def __init__(self, model: str) -> None:
        super().__init__(f"Model not found: {model}")
        self.model = model


class ProviderError(GatewayError):
    status_code = 502
    error_type = "provider_error"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Provider error: {detail}")
        self.detail = detail

    def is_deployment_failure(self) -> bool:
        return True


class BudgetExceeded(GatewayError):
    status_code = 402
    error_type = "budget_exceeded"
    _logged_to_db = False

    def __init__(self) -> None:
        super().__init__("Budget exceeded for key")


class ConfigError(GatewayError):
    status_code = 500
    error_type = "internal_error"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Config error: {detail}")
        self.detail = detail


class KeyExpired(GatewayError):
    status_code = 401
    error_type = "key_expired"

    def __init__(self) -> None:
        super().__init__("Key expired")


class KeyBlocked(GatewayError):
    status_code = 403
    error_type = "key_blocked"

    def __init__(self) -> None:
        super().__init__("Key blocked")


class ModelNotAllowed(GatewayError):
    status_code = 403
    error_type = "model_not_allowed"

    def __init__(self, model: str) -> None:
        super().__init__(f"Model not allowed: {model}")
        self.model = model


class UpstreamTimeout(GatewayError):
    status_code = 504
    error_type = "timeout"

    def __init__(self) -> None:
        super().__init__("Upstream timeout")


class UpstreamError(GatewayError):
    """The upstream answered with an error status."""

    status_code = 502
    error_type = "upstream_error"

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Upstream error ({status}): {message}")
        self.status = status
        self.message = message

    def is_deployment_failure(self) -> bool:
        return self.status in (401, 403)


class NotSupported(GatewayError):
    status_code = 404
    error_type = "not_supported"

    def __init__(self, endpoint: str) -> None:
        super().__init__(f"Endpoint not supported: {endpoint}")
        self.endpoint = endpoint


class FlowControlQueueTimeout(GatewayError):
    status_code = 503
    error_type = "flow_control_timeout"
    _logged_to_db = False

    def __init__(self, deployment_id: str, waiters: int, message: str) -> None:
        super().__init__(f"Flow control queue timeout: {message}")
        self.deployment_id = deployment_id
        self.waiters = waiters
        self.message = message


class InternalError(GatewayError):
    status_code = 500
    error_type = "internal_error"

    def __init__(self, detail: str) -> None:
        super().__init__(f"Internal error: {detail}")
        self.detail = detail