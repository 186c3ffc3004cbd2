"""
Process-wide defaults shared by the management and extension clients
"""

import tempfile

DEFAULT_PORT = 443
DEFAULT_PROVIDER = 'tmos'
REQUEST_TIMEOUT = 30  # seconds, per HTTP call

# Task polling / general retrier
RETRY_COUNT = 100
RETRY_DELAY_SECONDS = 1

# Tokens are treated as expired this many seconds before the device drops them
TOKEN_EXPIRY_SKEW = 1

UPLOAD_CHUNK_SIZE = 1024 * 1024
TMP_DIR = tempfile.gettempdir()

AUTH_HEADER = 'X-F5-Auth-Token'

LOGIN_URI = '/mgmt/shared/authn/login'
TOKEN_URI = '/mgmt/shared/authz/tokens'
PKG_MGMT_URI = '/mgmt/shared/iapp/package-management-tasks'
UPLOAD_URI = '/mgmt/shared/file-transfer/uploads'
REMOTE_DOWNLOADS_DIR = '/var/config/rest/downloads'

METADATA_URL = 'https://cdn.f5.com/product/cloudsolutions/f5-extension-metadata/latest/metadata.json'


class HTTP_STATUS_CODES:
    OK = 200
    ACCEPTED = 202
    UNAUTHORIZED = 401
