from unittest.mock import MagicMock

import pytest
import requests
from structlog.testing import capture_logs

from sbomlicenses.services.url_service import file_name_from_url
from sbomlicenses.services.url_service import UrlLicenseService


@pytest.fixture
def session():
    return MagicMock()


def make_response(status_code=200, content=b'Apache License\nVersion 2.0'):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


def test_fetch_success(session):
    session.get.return_value = make_response()
    service = UrlLicenseService(session, timeout=5)

    artifact = service.fetch('https://example.com/legal/LICENSE.txt')

    assert artifact.content == b'Apache License\nVersion 2.0'
    assert artifact.file_name == 'LICENSE.txt'
    session.get.assert_called_once_with('https://example.com/legal/LICENSE.txt', timeout=5)


def test_fetch_non_success_status(session):
    session.get.return_value = make_response(status_code=403)
    assert UrlLicenseService(session).fetch('https://example.com/LICENSE') is None


def test_fetch_transport_error(session):
    session.get.side_effect = requests.Timeout('slow')

    with capture_logs() as captured:
        assert UrlLicenseService(session).fetch('https://example.com/LICENSE') is None

    assert captured == [{
        'event': 'Error downloading license URL',
        'log_level': 'warning',
        'url': 'https://example.com/LICENSE',
        'error': 'slow',
    }]


@pytest.mark.parametrize(
    ('url', 'expected'), [
        ('https://example.com/LICENSE.md', 'LICENSE.md'),
        ('https://example.com/path/to/COPYING?raw=true', 'COPYING'),
        ('https://licenses.nuget.org/MIT', 'MIT'),
        ('https://example.com/', 'LICENSE'),
        ('https://example.com', 'LICENSE'),
        ('https://example.com/My%20License.txt', 'My License.txt'),
    ],
)
def test_file_name_from_url(url, expected):
    assert file_name_from_url(url) == expected
