"""
HTTP transport helpers

Thin wrappers around ``requests`` used by the management client and the
extension clients: base URL building (IPv6 aware), request dispatch with JSON
or raw bodies, response body parsing and streamed downloads.
"""

import logging
from urllib.parse import urlsplit

import requests
import urllib3

from .constants import DEFAULT_PORT, REQUEST_TIMEOUT

# Disable SSL warnings for self-signed certificates
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

module_logger = logging.getLogger(__name__)


def create_session(verify=False):
    """Create a requests session configured for BIG-IP management interfaces"""
    session = requests.Session()
    session.verify = verify
    return session


def format_host(host):
    """Bracket IPv6 literals so they can be used in a URL"""
    if ':' in host and not host.startswith('['):
        return f"[{host}]"
    return host


def build_base_url(host, port=DEFAULT_PORT):
    return f"https://{format_host(host)}:{port}"


def parse_url(url):
    """Split a full URL into its host part and path (including any query)"""
    parts = urlsplit(url)
    path = parts.path or '/'
    if parts.query:
        path = f"{path}?{parts.query}"
    return {'host': parts.netloc, 'path': path}


def parse_body(response):
    """Return the JSON body when there is one, otherwise the raw text"""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def send_request(session, base_url, uri, method='GET', headers=None, body=None,
                 timeout=REQUEST_TIMEOUT, logger=None):
    """Send one request and return the ``requests.Response``

    ``bytes`` bodies are sent as-is (file upload chunks), anything else that is
    not None is serialized as JSON.
    """
    logger = logger or module_logger
    url = f"{base_url}{uri}"
    kwargs = {
        'headers': dict(headers or {}),
        'timeout': timeout,
    }
    if isinstance(body, (bytes, bytearray)):
        kwargs['data'] = bytes(body)
    elif body is not None:
        kwargs['json'] = body

    logger.debug("Making HTTP request: %s %s", method, url)
    response = session.request(method, url, **kwargs)
    logger.debug("HTTP response: %s %s -> %s", method, url, response.status_code)
    return response


def download_to_file(url, file_path, session=None, timeout=REQUEST_TIMEOUT,
                     chunk_size=8192, logger=None):
    """Stream a remote file to local disk and return the number of bytes written"""
    logger = logger or module_logger
    session = session or create_session()

    logger.debug("Downloading %s to %s", url, file_path)
    response = session.get(url, stream=True, timeout=timeout)
    response.raise_for_status()

    written = 0
    with open(file_path, 'wb') as f:
        for chunk in response.iter_content(chunk_size=chunk_size):
            if chunk:  # Filter out keep-alive chunks
                f.write(chunk)
                written += len(chunk)

    logger.debug("Downloaded %d bytes to %s", written, file_path)
    return written
