"""
F5 BIG-IP Extension SDK

Manages BIG-IP devices and their extensions (AS3, DO, TS, CF) over the
iControl REST management API.
"""

from .management_client import ManagementClient
from .auth_handler import BigIPAuthHandler, Token
from .task_poller import TaskStatus, poll_task, retrier
from .logger import configure_logging
from .exceptions import (
    F5SDKError,
    AuthError,
    HttpStatusError,
    TaskFailedError,
    HashMismatchError,
    AmbiguousPackageError,
    TimeoutExhaustedError,
    UnsupportedOperationError,
    UnknownComponentError,
)
from .extension import (
    ExtensionClient,
    AS3Client,
    DOClient,
    TSClient,
    CFClient,
    get_extension_client,
)

__all__ = [
    'ManagementClient',
    'BigIPAuthHandler',
    'Token',
    'TaskStatus',
    'poll_task',
    'retrier',
    'configure_logging',
    'F5SDKError',
    'AuthError',
    'HttpStatusError',
    'TaskFailedError',
    'HashMismatchError',
    'AmbiguousPackageError',
    'TimeoutExhaustedError',
    'UnsupportedOperationError',
    'UnknownComponentError',
    'ExtensionClient',
    'AS3Client',
    'DOClient',
    'TSClient',
    'CFClient',
    'get_extension_client'
]

__version__ = '1.0.0'
__description__ = 'F5 BIG-IP management and extension SDK'
