"""
Authentication handling for F5 BIG-IP devices

Owns the single auth token of a device connection. Tokens are fetched on
demand and expire locally at ``obtained + timeout - TOKEN_EXPIRY_SKEW``; the
expiry is checked whenever a caller asks for a token, so nothing runs in the
background.
"""

import logging
import threading
import time
from dataclasses import dataclass

import requests

from . import http_utils
from .constants import (
    AUTH_HEADER,
    DEFAULT_PORT,
    DEFAULT_PROVIDER,
    LOGIN_URI,
    REQUEST_TIMEOUT,
    TOKEN_EXPIRY_SKEW,
    TOKEN_URI,
)
from .exceptions import AuthError

module_logger = logging.getLogger(__name__)


@dataclass
class Token:
    """Auth token as reported by the device"""
    value: str
    timeout: int
    expires_at: float

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class BigIPAuthHandler:
    """Handles authentication for F5 BIG-IP devices"""

    def __init__(self, host, username, password, session=None, port=DEFAULT_PORT,
                 provider=DEFAULT_PROVIDER, timeout=REQUEST_TIMEOUT,
                 clock=time.monotonic, logger=None):
        """Initialize authentication handler"""
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.provider = provider
        self.session = session or http_utils.create_session()
        self.base_url = http_utils.build_base_url(host, port)
        self.request_timeout = timeout
        self.clock = clock
        self.logger = logger or module_logger
        self._token = None
        self._lock = threading.Lock()

    def ensure_token(self):
        """Return a valid token value, logging in first if none is held"""
        token = self._valid_token()
        if token:
            return token.value

        # Only one caller logs in; the rest reuse its token
        with self._lock:
            token = self._valid_token()
            if token:
                return token.value
            self._token = self._login()
            return self._token.value

    def clear_token(self):
        """Discard the current token so the next request re-authenticates"""
        self._token = None

    def _valid_token(self):
        token = self._token
        if token is None:
            return None
        if token.is_expired(self.clock()):
            self.logger.debug("Auth token for %s expired, clearing it", self.host)
            if self._token is token:
                self._token = None
            return None
        return token

    def _login(self):
        """Get authentication token from BIG-IP"""
        self.logger.debug("Getting auth token from %s:%s", self.host, self.port)

        # Prepare authentication payload
        auth_data = {
            "username": self.username,
            "password": self.password,
            "loginProviderName": self.provider
        }

        try:
            response = http_utils.send_request(
                self.session,
                self.base_url,
                LOGIN_URI,
                method='POST',
                body=auth_data,
                timeout=self.request_timeout,
                logger=self.logger
            )
        except requests.exceptions.RequestException as e:
            raise AuthError(f"Error getting authentication token from {self.host}: {e}",
                            host=self.host) from e

        if response.status_code != 200:
            raise AuthError(
                f"Authentication failed for {self.host}: {response.status_code} - {response.text}",
                host=self.host,
                status=response.status_code
            )

        auth_response = http_utils.parse_body(response)
        token_data = auth_response.get('token') if isinstance(auth_response, dict) else None
        if not isinstance(token_data, dict) or not token_data.get('token'):
            raise AuthError(f"Failed to obtain authentication token from {self.host}",
                            host=self.host, status=response.status_code)

        timeout = int(token_data.get('timeout') or 0)
        self.logger.info("Authentication token obtained from %s (timeout %ss)", self.host, timeout)
        return Token(
            value=token_data['token'],
            timeout=timeout,
            expires_at=self.clock() + timeout - TOKEN_EXPIRY_SKEW
        )

    def extend_token_timeout(self, timeout):
        """Extend the authentication token timeout on the device"""
        token_value = self.ensure_token()
        response = http_utils.send_request(
            self.session,
            self.base_url,
            f"{TOKEN_URI}/{token_value}",
            method='PATCH',
            headers={AUTH_HEADER: token_value},
            body={"timeout": timeout},
            timeout=self.request_timeout,
            logger=self.logger
        )
        response.raise_for_status()

        with self._lock:
            if self._token is not None and self._token.value == token_value:
                self._token = Token(
                    value=token_value,
                    timeout=timeout,
                    expires_at=self.clock() + timeout - TOKEN_EXPIRY_SKEW
                )
        self.logger.debug("Token timeout extended to %s seconds", timeout)

    def logout(self):
        """Logout and invalidate the authentication token"""
        token = self._token
        self.clear_token()
        if token is None or token.is_expired(self.clock()):
            return

        try:
            http_utils.send_request(
                self.session,
                self.base_url,
                f"{TOKEN_URI}/{token.value}",
                method='DELETE',
                headers={AUTH_HEADER: token.value},
                timeout=self.request_timeout,
                logger=self.logger
            )
            self.logger.debug("Successfully logged out from %s", self.host)
        except requests.exceptions.RequestException as e:
            self.logger.warning("Could not logout cleanly from %s: %s", self.host, e)

    def is_authenticated(self):
        """Check if a valid token is currently held"""
        return self._valid_token() is not None

    def get_token(self):
        """Get the current token, or None when none is held"""
        return self._valid_token()
