"""
BIG-IP extension clients (package lifecycle and service operations)
"""

from .metadata import MetadataClient
from .package import PackageClient
from .service import ServiceClient
from .clients import ExtensionClient, AS3Client, DOClient, TSClient, CFClient, get_extension_client

__all__ = [
    'MetadataClient',
    'PackageClient',
    'ServiceClient',
    'ExtensionClient',
    'AS3Client',
    'DOClient',
    'TSClient',
    'CFClient',
    'get_extension_client'
]
