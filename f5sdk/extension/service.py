"""
Extension Service Module

Configuration operations against an extension's REST endpoints. Which
operations a component supports comes from its metadata: an operation is
available when the component declares the endpoint it targets and that
endpoint lists the HTTP method it uses.

Some components answer a configuration POST with 202 Accepted and a
``selfLink`` to a task. The task URI keeps returning 202 until the task is
done, then returns 200 with the final result.
"""

import logging
import time

from .. import http_utils
from ..constants import HTTP_STATUS_CODES, RETRY_COUNT, RETRY_DELAY_SECONDS
from ..exceptions import HttpStatusError, UnsupportedOperationError
from ..task_poller import FAILED, FINISHED, RUNNING, TaskStatus, poll_task

module_logger = logging.getLogger(__name__)

# operation -> (endpoint name, HTTP method)
OPERATIONS = {
    'is_available': ('configure', 'GET'),
    'show': ('configure', 'GET'),
    'create': ('configure', 'POST'),
    'delete': ('configure', 'DELETE'),
    'show_info': ('info', 'GET'),
    'show_inspect': ('inspect', 'GET'),
    'show_trigger': ('trigger', 'GET'),
    'trigger': ('trigger', 'POST'),
    'reset': ('reset', 'POST'),
}


def task_uri_from_self_link(self_link):
    """Strip scheme and host from a selfLink, leaving the relative task URI"""
    return http_utils.parse_url(self_link)['path']


class ServiceClient:
    """Service operations for one extension component"""

    def __init__(self, mgmt_client, metadata_client, retry_count=RETRY_COUNT,
                 retry_delay=RETRY_DELAY_SECONDS, sleep=time.sleep, logger=None):
        self._mgmt_client = mgmt_client
        self._metadata_client = metadata_client
        self._component = metadata_client.get_component_name()
        self._component_version = metadata_client.get_component_version()
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.logger = logger or module_logger

    def capabilities(self):
        """Set of operation names supported by this component"""
        return {operation for operation in OPERATIONS if self.supports(operation)}

    def supports(self, operation):
        if operation not in OPERATIONS:
            return False
        endpoint_name, method = OPERATIONS[operation]
        endpoint = self._metadata_client.get_endpoint(endpoint_name)
        if endpoint is None:
            return False
        # Endpoints without a method list accept everything
        return not endpoint['methods'] or method in endpoint['methods']

    def is_available(self):
        """Check if the service answers on its configuration endpoint"""
        response = self._mgmt_client.make_request(self._uri_for('is_available'), raw_response=True)
        return str(response['status_code']).startswith('2')

    def show(self):
        return self._mgmt_client.make_request(self._uri_for('show'))

    def show_info(self):
        return self._mgmt_client.make_request(self._uri_for('show_info'))

    def create(self, config=None):
        """Post a declaration, waiting for the async task when one is returned"""
        uri = self._uri_for('create')
        response = self._mgmt_client.make_request(
            uri,
            method='POST',
            body=config,
            raw_response=True
        )

        if response['status_code'] == HTTP_STATUS_CODES.ACCEPTED:
            body = response['body']
            if not isinstance(body, dict) or not body.get('selfLink'):
                raise HttpStatusError(response['status_code'], body, method='POST', uri=uri)
            task_uri = task_uri_from_self_link(body['selfLink'])
            self.logger.info("%s accepted declaration, waiting for task %s", self._component, task_uri)
            return self._wait_for_task(task_uri)
        return response['body']

    def delete(self):
        return self._mgmt_client.make_request(self._uri_for('delete'), method='DELETE')

    def show_inspect(self):
        return self._mgmt_client.make_request(self._uri_for('show_inspect'))

    def show_trigger(self):
        return self._mgmt_client.make_request(self._uri_for('show_trigger'))

    def trigger(self, config=None):
        return self._mgmt_client.make_request(self._uri_for('trigger'), method='POST', body=config)

    def reset(self, config=None):
        return self._mgmt_client.make_request(self._uri_for('reset'), method='POST', body=config)

    def _uri_for(self, operation):
        if not self.supports(operation):
            raise UnsupportedOperationError(self._component, operation)
        endpoint_name, _ = OPERATIONS[operation]
        return self._metadata_client.get_endpoint(endpoint_name)['uri']

    def _check_task_state(self, task_uri):
        """One task poll: 200 is done, 202 is still running, anything else fails"""
        task_response = self._mgmt_client.make_request(task_uri, raw_response=True)
        status_code = task_response['status_code']

        if status_code == HTTP_STATUS_CODES.OK:
            return TaskStatus(FINISHED, result=task_response['body'])
        if status_code == HTTP_STATUS_CODES.ACCEPTED:
            return TaskStatus(RUNNING)
        return TaskStatus(FAILED, error=f"Task state has not passed: {status_code}")

    def _wait_for_task(self, task_uri):
        return poll_task(
            lambda: self._check_task_state(task_uri),
            max_attempts=self.retry_count,
            delay=self.retry_delay,
            sleep=self._sleep,
            description=f"{self._component} task {task_uri}",
            logger=self.logger
        )
