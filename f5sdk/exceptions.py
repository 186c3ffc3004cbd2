"""
Exception hierarchy raised by the SDK
"""

import json
from typing import Any, Optional


class F5SDKError(RuntimeError):
    """Base class for every error raised by f5sdk"""


class AuthError(F5SDKError):
    """Login call failed or returned no token"""

    def __init__(self, message: str, *, host: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.host = host
        self.status = status


class HttpStatusError(F5SDKError):
    """Device answered with a status code above 300"""

    def __init__(
        self,
        status: int,
        body: Any = None,
        *,
        method: Optional[str] = None,
        uri: Optional[str] = None,
    ) -> None:
        self.status = status
        self.body = body
        self.method = method
        self.uri = uri
        super().__init__(f"HTTP request failed: {status} {stringify(body)}")


class TaskFailedError(F5SDKError):
    """Remote task reported a FAILED state"""

    def __init__(self, message: str, *, error_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.error_message = error_message


class HashMismatchError(F5SDKError):
    """Downloaded artifact does not match the expected SHA-256 digest"""

    def __init__(self, file_path: str, expected: str, actual: str) -> None:
        super().__init__(f"Downloaded file does not match the provided hash: {file_path}")
        self.file_path = file_path
        self.expected = expected
        self.actual = actual


class AmbiguousPackageError(F5SDKError):
    """More than one installed package matched the component package name"""

    def __init__(self, package_name: str, matches) -> None:
        super().__init__(
            f"Found {len(matches)} installed packages named '{package_name}': "
            f"{', '.join(str(m) for m in matches)}"
        )
        self.package_name = package_name
        self.matches = list(matches)


class TimeoutExhaustedError(F5SDKError):
    """Polling ran out of attempts before the task reached a terminal state"""

    def __init__(self, description: str, attempts: int, last_state: Optional[str] = None) -> None:
        super().__init__(
            f"Max attempts ({attempts}) exceeded waiting for {description}, last state: {last_state}"
        )
        self.description = description
        self.attempts = attempts
        self.last_state = last_state


class UnsupportedOperationError(F5SDKError):
    """Component metadata does not declare the endpoint or method for an operation"""

    def __init__(self, component: str, operation: str) -> None:
        super().__init__(f"Component '{component}' does not support operation '{operation}'")
        self.component = component
        self.operation = operation


class UnknownComponentError(F5SDKError):
    """Component or component version is missing from the metadata catalog"""


def stringify(data) -> str:
    """Render a response body for error messages"""
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data)
    except (TypeError, ValueError):
        return str(data)
