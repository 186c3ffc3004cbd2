"""
BIG-IP management client

Base connectivity client: holds the connection details, delegates token
handling to ``BigIPAuthHandler`` and sends authenticated requests.

Basic example::

    mgmt_client = ManagementClient('192.0.2.1', 'admin', 'admin')
    mgmt_client.make_request('/mgmt/tm/sys/version')
"""

import logging
import time

from . import http_utils
from .auth_handler import BigIPAuthHandler
from .constants import (
    AUTH_HEADER,
    DEFAULT_PORT,
    DEFAULT_PROVIDER,
    HTTP_STATUS_CODES,
    REQUEST_TIMEOUT,
)
from .exceptions import HttpStatusError

module_logger = logging.getLogger(__name__)


class ManagementClient:
    """Authenticated request dispatcher for one BIG-IP device"""

    def __init__(self, host, user, password, port=DEFAULT_PORT, provider=DEFAULT_PROVIDER,
                 session=None, timeout=REQUEST_TIMEOUT, clock=time.monotonic, logger=None):
        self.host = host
        self.port = port
        self.provider = provider
        self.timeout = timeout
        self.logger = logger or module_logger
        self.session = session or http_utils.create_session()
        self.base_url = http_utils.build_base_url(host, port)

        self.auth_handler = BigIPAuthHandler(
            host,
            user,
            password,
            session=self.session,
            port=port,
            provider=provider,
            timeout=timeout,
            clock=clock,
            logger=self.logger
        )

    @property
    def token(self):
        """Get the current authentication token"""
        return self.auth_handler.get_token()

    def login(self):
        """Make sure a valid token is held, fetching one if needed"""
        return self.auth_handler.ensure_token()

    def clear_token(self):
        """Clear the auth token, forcing the next request to log in again"""
        self.auth_handler.clear_token()

    def logout(self):
        """Logout and cleanup session"""
        self.auth_handler.logout()

    def make_request(self, uri, method='GET', headers=None, body=None, raw_response=False):
        """Make an authenticated HTTP request

        With ``raw_response`` the status code and parsed body are returned for
        any status. Otherwise the parsed body is returned and any status above
        300 raises ``HttpStatusError``.
        """
        token = self.auth_handler.ensure_token()

        request_headers = dict(headers or {})
        request_headers[AUTH_HEADER] = token

        response = http_utils.send_request(
            self.session,
            self.base_url,
            uri,
            method=method,
            headers=request_headers,
            body=body,
            timeout=self.timeout,
            logger=self.logger
        )

        if response.status_code == HTTP_STATUS_CODES.UNAUTHORIZED:
            # Token was rejected before its local expiry
            self.logger.warning("Auth token rejected by %s, clearing it", self.host)
            self.auth_handler.clear_token()

        response_body = http_utils.parse_body(response)

        if raw_response:
            return {
                'status_code': response.status_code,
                'body': response_body
            }

        if response.status_code > 300:
            raise HttpStatusError(response.status_code, response_body, method=method, uri=uri)
        return response_body
