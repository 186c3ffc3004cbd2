"""Tests for the per-component extension clients."""

from __future__ import annotations

import pytest

from f5sdk import AS3Client, CFClient, DOClient, TSClient, get_extension_client
from f5sdk.constants import METADATA_URL
from f5sdk.exceptions import UnknownComponentError
from f5sdk.extension.metadata import load_local_metadata
from f5sdk.extension.package import PackageClient
from f5sdk.extension.service import ServiceClient


@pytest.mark.parametrize(
    ('client_class', 'component'),
    [(AS3Client, 'as3'), (DOClient, 'do'), (TSClient, 'ts'), (CFClient, 'cf')],
)
def test_component_clients(mgmt_client, client_class, component):
    client = client_class(mgmt_client)

    assert client.component == component
    assert isinstance(client.package, PackageClient)
    assert isinstance(client.service, ServiceClient)
    assert client.metadata.get_component_name() == component


def test_pinned_version(mgmt_client):
    client = AS3Client(mgmt_client, version='3.10.0')

    assert client.metadata.get_component_version() == '3.10.0'
    assert client.package.get_versions_list() == ['3.10.0', '3.19.1', '3.20.0']


def test_get_extension_client_by_component_id(mgmt_client):
    assert get_extension_client('cf', mgmt_client).service.supports('reset') is True
    with pytest.raises(UnknownComponentError):
        get_extension_client('foo', mgmt_client)


def test_get_latest_metadata(mgmt_client, session):
    session.add('GET', METADATA_URL, 200, load_local_metadata())
    client = TSClient(mgmt_client, download_session=session)

    assert client.get_latest_metadata() is True


def test_end_to_end_service_call(mgmt_client, session):
    session.add_login()
    session.add('GET', '/mgmt/shared/appsvcs/info', 200, {'version': '3.20.0'})

    assert AS3Client(mgmt_client).service.show_info() == {'version': '3.20.0'}
