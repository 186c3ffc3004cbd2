"""
Extension Metadata Module

Read-only lookups into the F5 extension metadata catalog: package names,
download locations and REST endpoints for each extension component and
version. A copy of the catalog ships with the package; ``get_latest_metadata``
refreshes it from the public CDN feed on a best-effort basis.
"""

import copy
import json
import logging
import os
import re
from typing import Dict, List, Optional

import requests

from .. import http_utils
from ..constants import METADATA_URL, REQUEST_TIMEOUT
from ..exceptions import UnknownComponentError
from ..task_poller import retrier

module_logger = logging.getLogger(__name__)

LOCAL_METADATA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'extension_metadata.json')

ENDPOINT_NAMES = ('configure', 'info', 'inspect', 'trigger', 'reset')

_local_metadata_cache = None


def load_local_metadata():
    """Load the bundled metadata catalog (parsed once per process)"""
    global _local_metadata_cache
    if _local_metadata_cache is None:
        with open(LOCAL_METADATA_FILE, 'r', encoding='utf-8') as f:
            _local_metadata_cache = json.load(f)
    return copy.deepcopy(_local_metadata_cache)


class MetadataClient:
    """Metadata lookups for one extension component and version"""

    def __init__(self, component: str, component_version: Optional[str] = None,
                 metadata: Optional[Dict] = None, session=None, retry_count=3,
                 retry_interval=1, logger=None):
        self.logger = logger or module_logger
        self.session = session
        self.retry_count = retry_count
        self.retry_interval = retry_interval
        self._metadata = metadata if metadata is not None else load_local_metadata()
        self._component = component

        # Fail early on unknown components
        self._get_component_metadata()
        self._component_version = component_version or self.get_latest_version()
        self._get_component_version_metadata()

    def get_component_name(self) -> str:
        return self._component

    def get_component_version(self) -> str:
        return self._component_version

    def get_component_package_name(self) -> str:
        """Get component package name, i.e. the packageName without its version suffix"""
        package_name = self._get_component_version_metadata()['packageName']
        match = re.match(r'.+?(?=-[0-9])', package_name)
        return match.group(0) if match else package_name

    def get_component_versions_list(self) -> List[str]:
        return list(self._get_component_metadata()['versions'].keys())

    def get_latest_version(self) -> str:
        """Get the version flagged as latest (there should only be one)"""
        versions = self._get_component_metadata()['versions']
        latest_versions = [version for version, info in versions.items() if info.get('latest')]
        if not latest_versions:
            raise UnknownComponentError(f"No latest version declared for component '{self._component}'")
        if len(latest_versions) > 1:
            self.logger.warning("Multiple latest versions declared for %s: %s",
                                self._component, ', '.join(latest_versions))
        return latest_versions[0]

    def get_download_url(self) -> str:
        return self._get_component_version_metadata()['downloadUrl']

    def get_download_package_name(self) -> str:
        """Get the package file name from the end of the download URL"""
        return self.get_download_url().rstrip('/').split('/')[-1]

    def get_endpoints(self) -> Dict[str, Dict]:
        """Get every endpoint declared for the component"""
        return {name: self.get_endpoint(name) for name in self._get_component_metadata().get('endpoints', {})}

    def get_endpoint(self, name: str) -> Optional[Dict]:
        """Get endpoint properties ({'uri', 'methods'}) or None when not declared"""
        endpoint = self._get_component_metadata().get('endpoints', {}).get(name)
        if not endpoint:
            return None
        return {
            'uri': endpoint['uri'],
            'methods': [m.upper() for m in endpoint.get('methods', [])]
        }

    def get_configuration_endpoint(self):
        return self.get_endpoint('configure')

    def get_info_endpoint(self):
        return self.get_endpoint('info')

    def get_inspect_endpoint(self):
        return self.get_endpoint('inspect')

    def get_trigger_endpoint(self):
        return self.get_endpoint('trigger')

    def get_reset_endpoint(self):
        return self.get_endpoint('reset')

    def get_latest_metadata(self):
        """Refresh the catalog from the CDN; keep the current one if that fails"""
        try:
            metadata = retrier(
                self._fetch_remote_metadata,
                max_retries=self.retry_count,
                retry_interval=self.retry_interval,
                logger=self.logger
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.warning("Could not refresh extension metadata from %s: %s", METADATA_URL, e)
            return False

        if not isinstance(metadata, dict) or self._component not in metadata.get('components', {}):
            self.logger.warning("Extension metadata from %s has no entry for %s, keeping current metadata",
                                METADATA_URL, self._component)
            return False
        if self._component_version not in metadata['components'][self._component].get('versions', {}):
            self.logger.warning("Extension metadata from %s has no %s version %s, keeping current metadata",
                                METADATA_URL, self._component, self._component_version)
            return False

        self._metadata = metadata
        self.logger.debug("Loaded latest extension metadata from %s", METADATA_URL)
        return True

    def _fetch_remote_metadata(self):
        session = self.session or http_utils.create_session(verify=True)
        response = session.get(METADATA_URL, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def _get_component_metadata(self):
        components = self._metadata.get('components', {})
        if self._component not in components:
            raise UnknownComponentError(f"Unknown component: {self._component}")
        return components[self._component]

    def _get_component_version_metadata(self):
        versions = self._get_component_metadata()['versions']
        if self._component_version not in versions:
            raise UnknownComponentError(
                f"Unknown version '{self._component_version}' for component '{self._component}'"
            )
        return versions[self._component_version]
