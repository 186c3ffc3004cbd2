"""Tests for extension service operations."""

from __future__ import annotations

import pytest

from f5sdk.exceptions import HttpStatusError, TaskFailedError, TimeoutExhaustedError, UnsupportedOperationError
from f5sdk.extension.metadata import MetadataClient
from f5sdk.extension.service import ServiceClient, task_uri_from_self_link

ENDPOINTS = {
    'as3': {
        'configure': '/mgmt/shared/appsvcs/declare',
        'info': '/mgmt/shared/appsvcs/info',
    },
    'do': {
        'configure': '/mgmt/shared/declarative-onboarding',
        'info': '/mgmt/shared/declarative-onboarding/info',
        'inspect': '/mgmt/shared/declarative-onboarding/inspect',
    },
    'ts': {
        'configure': '/mgmt/shared/telemetry/declare',
        'info': '/mgmt/shared/telemetry/info',
    },
    'cf': {
        'configure': '/mgmt/shared/cloud-failover/declare',
        'info': '/mgmt/shared/cloud-failover/info',
        'inspect': '/mgmt/shared/cloud-failover/inspect',
        'trigger': '/mgmt/shared/cloud-failover/trigger',
        'reset': '/mgmt/shared/cloud-failover/reset',
    },
}


@pytest.fixture
def service_factory(mgmt_client):
    def _make(component, retry_count=5):
        return ServiceClient(
            mgmt_client,
            MetadataClient(component),
            retry_count=retry_count,
            retry_delay=0,
            sleep=lambda _: None
        )
    return _make


@pytest.mark.parametrize('component', sorted(ENDPOINTS))
def test_is_available(service_factory, session, component):
    session.add_login()
    session.add('GET', ENDPOINTS[component]['configure'], 200, {})
    session.add('GET', ENDPOINTS[component]['configure'], 500, {})
    service = service_factory(component)

    assert service.is_available() is True
    assert service.is_available() is False


@pytest.mark.parametrize('component', sorted(ENDPOINTS))
def test_show_and_show_info(service_factory, session, component):
    session.add_login()
    session.add('GET', ENDPOINTS[component]['configure'], 200, {'declaration': {}})
    session.add('GET', ENDPOINTS[component]['info'], 200, {'version': '1.0.0'})
    service = service_factory(component)

    assert service.show() == {'declaration': {}}
    assert service.show_info() == {'version': '1.0.0'}


@pytest.mark.parametrize('component', sorted(ENDPOINTS))
def test_create_returns_synchronous_body(service_factory, session, component):
    session.add_login()
    session.add('POST', ENDPOINTS[component]['configure'], 200, {'result': {'code': 200}})
    service = service_factory(component)

    assert service.create(config={'class': 'ADC'}) == {'result': {'code': 200}}
    assert session.calls_to('POST', ENDPOINTS[component]['configure'])[0]['json'] == {'class': 'ADC'}


def test_create_waits_for_async_task(service_factory, session):
    session.add_login()
    session.add('POST', ENDPOINTS['do']['configure'], 202, {'selfLink': 'https://localhost/task/42'})
    session.add('GET', '/task/42', 202, {})
    session.add('GET', '/task/42', 202, {})
    session.add('GET', '/task/42', 200, {'result': {'status': 'OK'}})

    response = service_factory('do').create(config={})

    assert response == {'result': {'status': 'OK'}}
    assert len(session.calls_to('GET', '/task/42')) == 3


def test_create_fails_on_unexpected_task_status(service_factory, session):
    session.add_login()
    session.add('POST', ENDPOINTS['as3']['configure'], 202, {'selfLink': 'https://localhost/task/42'})
    session.add('GET', '/task/42', 202, {})
    session.add('GET', '/task/42', 422, {'message': 'invalid declaration'})

    with pytest.raises(TaskFailedError, match='Task state has not passed: 422'):
        service_factory('as3').create(config={})


def test_create_times_out_when_task_stays_accepted(service_factory, session):
    session.add_login()
    session.add('POST', ENDPOINTS['ts']['configure'], 202, {'selfLink': 'https://localhost/task/7'})
    for _ in range(3):
        session.add('GET', '/task/7', 202, {})

    with pytest.raises(TimeoutExhaustedError):
        service_factory('ts', retry_count=3).create(config={})


@pytest.mark.parametrize('body', [{}, {'selfLink': ''}, 'Accepted', None])
def test_create_accepted_without_self_link_raises(service_factory, session, body):
    session.add_login()
    session.add('POST', ENDPOINTS['as3']['configure'], 202, body)

    with pytest.raises(HttpStatusError) as excinfo:
        service_factory('as3').create(config={})

    assert excinfo.value.status == 202
    assert excinfo.value.uri == ENDPOINTS['as3']['configure']
    assert session.calls_to('GET', '/task/42') == []


def test_create_returns_error_body_verbatim_for_non_accepted_status(service_factory, session):
    session.add_login()
    session.add('POST', ENDPOINTS['as3']['configure'], 422, {'code': 422})

    assert service_factory('as3').create(config={}) == {'code': 422}


def test_task_uri_from_self_link():
    assert task_uri_from_self_link('https://localhost/task/42') == '/task/42'
    assert task_uri_from_self_link('https://localhost:443/mgmt/shared/appsvcs/task/abc?show=full') == \
        '/mgmt/shared/appsvcs/task/abc?show=full'


def test_capabilities_follow_metadata(service_factory):
    common = {'is_available', 'show', 'create', 'show_info'}

    assert service_factory('as3').capabilities() == common | {'delete'}
    assert service_factory('do').capabilities() == common | {'show_inspect'}
    assert service_factory('ts').capabilities() == common
    assert service_factory('cf').capabilities() == common | {'show_inspect', 'show_trigger', 'trigger', 'reset'}


def test_delete(service_factory, session):
    session.add_login()
    session.add('DELETE', ENDPOINTS['as3']['configure'], 200, {'results': []})

    assert service_factory('as3').delete() == {'results': []}


def test_show_inspect(service_factory, session):
    session.add_login()
    session.add('GET', ENDPOINTS['do']['inspect'], 200, {'currentConfig': {}})

    assert service_factory('do').show_inspect() == {'currentConfig': {}}


def test_cloud_failover_trigger_and_reset(service_factory, session):
    session.add_login()
    session.add('GET', ENDPOINTS['cf']['inspect'], 200, {'instance': 'i-1'})
    session.add('GET', ENDPOINTS['cf']['trigger'], 200, {'taskState': 'SUCCEEDED'})
    session.add('POST', ENDPOINTS['cf']['trigger'], 202, {'taskState': 'RUNNING'})
    session.add('POST', ENDPOINTS['cf']['reset'], 200, {'message': 'success'})
    service = service_factory('cf')

    assert service.show_inspect() == {'instance': 'i-1'}
    assert service.show_trigger() == {'taskState': 'SUCCEEDED'}
    assert service.trigger(config={'action': 'execute'}) == {'taskState': 'RUNNING'}
    assert service.reset(config={'resetStateFile': True}) == {'message': 'success'}
    assert session.calls_to('POST', ENDPOINTS['cf']['reset'])[0]['json'] == {'resetStateFile': True}


@pytest.mark.parametrize(
    ('component', 'operation'),
    [
        ('ts', 'delete'),
        ('ts', 'show_inspect'),
        ('do', 'trigger'),
        ('do', 'reset'),
        ('as3', 'show_trigger'),
    ],
)
def test_unsupported_operations_make_no_requests(service_factory, session, component, operation):
    service = service_factory(component)

    with pytest.raises(UnsupportedOperationError) as excinfo:
        getattr(service, operation)()

    assert excinfo.value.component == component
    assert excinfo.value.operation == operation
    assert session.calls == []
