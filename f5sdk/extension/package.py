"""
Extension Package Module

Installs, uninstalls and queries extension RPM packages through the BIG-IP
package management task endpoint. Installation downloads the RPM locally,
optionally verifies its SHA-256 hash, uploads it to the device in 1 MiB
Content-Range chunks and then runs an INSTALL task to completion.
"""

import logging
import os
import re
import tempfile
import time

from .. import http_utils
from ..constants import (
    PKG_MGMT_URI,
    REMOTE_DOWNLOADS_DIR,
    RETRY_COUNT,
    RETRY_DELAY_SECONDS,
    TMP_DIR,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_URI,
)
from ..exceptions import AmbiguousPackageError, HashMismatchError
from ..task_poller import FAILED, FINISHED, RUNNING, TaskStatus, poll_task
from ..utils import file_sha256, read_file_range

module_logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r'\d+\.\d+\.\d+')


def content_ranges(file_size, chunk_size=UPLOAD_CHUNK_SIZE):
    """Yield inclusive (start, end) byte windows covering a file of file_size bytes"""
    start = 0
    while start < file_size:
        end = min(start + chunk_size - 1, file_size - 1)
        yield start, end
        start += chunk_size


def version_from_package_name(package_name):
    """Parse major.minor.patch out of a remote package name ('' when absent)"""
    if not package_name:
        return ''
    match = VERSION_PATTERN.search(package_name)
    return match.group(0) if match else ''


class PackageClient:
    """Package operations for one extension component"""

    def __init__(self, mgmt_client, metadata_client, tmp_dir=TMP_DIR, chunk_size=UPLOAD_CHUNK_SIZE,
                 retry_count=RETRY_COUNT, retry_delay=RETRY_DELAY_SECONDS, download_session=None,
                 sleep=time.sleep, logger=None):
        self._mgmt_client = mgmt_client
        self._metadata_client = metadata_client
        self._component = metadata_client.get_component_name()
        self._component_version = metadata_client.get_component_version()
        self.tmp_dir = tmp_dir
        self.chunk_size = chunk_size
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self.download_session = download_session
        self._sleep = sleep
        self.logger = logger or module_logger

    def is_installed(self, strict=False):
        """Get information about the component installation state"""
        installed_rpm_info = self._get_installed_rpm_info(strict=strict)
        return {
            'installed': installed_rpm_info['installed'],
            'installed_version': installed_rpm_info['installed_version'],
            'latest_version': self._metadata_client.get_latest_version()
        }

    def install(self, hash=None, delete_file=True):
        """Download, verify, upload and install the component package"""
        download_url = self._metadata_client.get_download_url()
        download_package_name = self._metadata_client.get_download_package_name()

        # Step 1: Download locally, one directory per call so the file name stays intact
        download_dir = tempfile.mkdtemp(prefix='f5sdk-', dir=self.tmp_dir)
        tmp_file = os.path.join(download_dir, download_package_name)
        try:
            self.logger.info("Downloading %s %s from %s", self._component, self._component_version, download_url)
            http_utils.download_to_file(download_url, tmp_file, session=self.download_session, logger=self.logger)

            # Step 2: Verify hash (optional)
            if hash:
                actual = file_sha256(tmp_file)
                if actual != hash.strip().lower():
                    self._remove_download(tmp_file)
                    raise HashMismatchError(tmp_file, hash, actual)
                self.logger.debug("Hash verified for %s", tmp_file)

            # Step 3: Upload to target
            self._upload_rpm(tmp_file, delete_file=False)
        finally:
            if delete_file:
                self._remove_download(tmp_file)

        # Step 4: Install on target
        self._install_rpm(f"{REMOTE_DOWNLOADS_DIR}/{download_package_name}")
        self.logger.info("Installed %s %s on %s", self._component, self._component_version,
                         self._mgmt_client.host)

        return {
            'component': self._component,
            'version': self._component_version
        }

    def uninstall(self):
        """Uninstall the component if it is installed (no-op otherwise)"""
        installed_component_info = self._get_installed_rpm_info()

        if installed_component_info['installed']:
            self._uninstall_rpm(installed_component_info['package_name'])
            self.logger.info("Uninstalled %s %s from %s", self._component,
                             installed_component_info['installed_version'], self._mgmt_client.host)
        else:
            self.logger.info("%s is not installed on %s, nothing to uninstall",
                             self._component, self._mgmt_client.host)

        return {
            'component': self._component,
            'version': installed_component_info['installed_version']
        }

    def get_versions_list(self):
        """List all the component versions available"""
        return self._metadata_client.get_component_versions_list()

    def _get_installed_rpm_info(self, strict=False):
        component_package_name = self._metadata_client.get_component_package_name()

        query_response = self._mgmt_client.make_request(
            PKG_MGMT_URI,
            method='POST',
            body={'operation': 'QUERY'}
        )
        response = self._check_rpm_task_status(query_response['id'], 'package query')

        # Find matching packages, typically only one match
        matching_packages = [
            package for package in (response.get('queryResponse') or [])
            if package.get('name') == component_package_name
        ]

        package_name = None
        if len(matching_packages) == 1:
            package_name = matching_packages[0].get('packageName')
        elif len(matching_packages) > 1:
            error = AmbiguousPackageError(
                component_package_name,
                [package.get('packageName') for package in matching_packages]
            )
            if strict:
                raise error
            self.logger.warning("%s, treating %s as not installed", error, self._component)

        return {
            'installed': package_name is not None,
            'installed_version': version_from_package_name(package_name),
            'package_name': package_name
        }

    def _check_rpm_task_status(self, task_id, description):
        """Poll a package management task until it finishes"""
        task_uri = f"{PKG_MGMT_URI}/{task_id}"

        def fetch_status():
            response = self._mgmt_client.make_request(task_uri)
            # Empty or non-JSON bodies count as still running
            if not isinstance(response, dict):
                response = {}
            status = response.get('status')
            if status == FINISHED:
                return TaskStatus(FINISHED, result=response)
            if status == FAILED:
                return TaskStatus(FAILED, error=response.get('errorMessage'))
            return TaskStatus(status or RUNNING)

        return poll_task(
            fetch_status,
            max_attempts=self.retry_count,
            delay=self.retry_delay,
            description=f"{self._component} {description} task {task_id}",
            sleep=self._sleep,
            logger=self.logger
        )

    def _install_rpm(self, package_path):
        response = self._mgmt_client.make_request(
            PKG_MGMT_URI,
            method='POST',
            body={
                'operation': 'INSTALL',
                'packageFilePath': package_path
            }
        )
        self._check_rpm_task_status(response['id'], 'package install')

    def _uninstall_rpm(self, package_name):
        response = self._mgmt_client.make_request(
            PKG_MGMT_URI,
            method='POST',
            body={
                'operation': 'UNINSTALL',
                'packageName': package_name
            }
        )
        self._check_rpm_task_status(response['id'], 'package uninstall')

    def _upload_rpm(self, file_path, delete_file=True):
        """Upload a local file to the device in serial Content-Range chunks"""
        file_name = os.path.basename(file_path)
        file_size = os.path.getsize(file_path)
        if file_size == 0:
            self.logger.warning("Skipping upload of empty file %s", file_path)

        chunk_count = 0
        for start, end in content_ranges(file_size, self.chunk_size):
            chunk_count += 1
            self._mgmt_client.make_request(
                f"{UPLOAD_URI}/{file_name}",
                method='POST',
                headers={
                    'Content-Type': 'application/octet-stream',
                    'Content-Range': f"{start}-{end}/{file_size}",
                    'Content-Length': str(end - start + 1)
                },
                body=read_file_range(file_path, start, end)
            )
            self.logger.debug("Uploaded %s bytes %d-%d/%d", file_name, start, end, file_size)

        self.logger.debug("Uploaded %s in %d chunk(s)", file_name, chunk_count)

        if delete_file:
            self._remove_file(file_path)

    def _remove_file(self, file_path):
        try:
            os.remove(file_path)
        except FileNotFoundError:
            pass

    def _remove_download(self, file_path):
        """Remove a downloaded package and its per-call directory"""
        self._remove_file(file_path)
        try:
            os.rmdir(os.path.dirname(file_path))
        except OSError as e:
            self.logger.debug("Could not remove download directory for %s: %s", file_path, e)
