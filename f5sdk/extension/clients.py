"""
Extension clients

One entry point per extension component. Every component gets the same
package and service clients; what each service supports is decided by the
component's metadata.

Basic example::

    extension_client = AS3Client(mgmt_client)
    extension_client.package.install()
    extension_client.service.create(config=declaration)
"""

import logging

from ..constants import RETRY_COUNT, RETRY_DELAY_SECONDS
from .metadata import MetadataClient
from .package import PackageClient
from .service import ServiceClient

module_logger = logging.getLogger(__name__)


class ExtensionClient:
    """Package and service access for one extension component on one device"""

    component = None

    def __init__(self, mgmt_client, component=None, version=None, metadata=None,
                 retry_count=RETRY_COUNT, retry_delay=RETRY_DELAY_SECONDS, download_session=None,
                 logger=None):
        self._mgmt_client = mgmt_client
        self.component = component or self.component
        self.download_session = download_session
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self.logger = logger or module_logger
        self._metadata_client = MetadataClient(
            self.component,
            component_version=version,
            metadata=metadata,
            session=download_session,
            logger=self.logger
        )

    @property
    def metadata(self):
        return self._metadata_client

    def get_latest_metadata(self):
        """Refresh component metadata from the CDN feed (best-effort)"""
        return self._metadata_client.get_latest_metadata()

    @property
    def package(self):
        return PackageClient(
            self._mgmt_client,
            self._metadata_client,
            retry_count=self.retry_count,
            retry_delay=self.retry_delay,
            download_session=self.download_session,
            logger=self.logger
        )

    @property
    def service(self):
        return ServiceClient(
            self._mgmt_client,
            self._metadata_client,
            retry_count=self.retry_count,
            retry_delay=self.retry_delay,
            logger=self.logger
        )


class AS3Client(ExtensionClient):
    component = 'as3'


class DOClient(ExtensionClient):
    component = 'do'


class TSClient(ExtensionClient):
    component = 'ts'


class CFClient(ExtensionClient):
    component = 'cf'


def get_extension_client(component, mgmt_client, **kwargs):
    """Factory function to create an ExtensionClient for a component id"""
    return ExtensionClient(mgmt_client, component=component, **kwargs)
