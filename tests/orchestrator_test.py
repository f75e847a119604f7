import base64
import io
import json
import zipfile
from unittest.mock import MagicMock

import pytest

from sbomlicenses.core.exclusion import ExclusionMatcher
from sbomlicenses.core.storage import LicenseStorage
from sbomlicenses.models.component import Component
from sbomlicenses.models.license import LicenseDownloadResult
from sbomlicenses.services.github_service import GitHubLicenseService
from sbomlicenses.services.nuget_service import NuGetLicenseService
from sbomlicenses.services.orchestrator_service import LicenseDownloadOrchestrator
from sbomlicenses.services.resolver_service import LicenseResolver
from sbomlicenses.services.sbom_service import SbomReader
from sbomlicenses.services.url_service import UrlLicenseService

MIT_TEXT = b'MIT License\n\nCopyright (c) Acme Corp\n'


def response(status_code=200, content=b''):
    r = MagicMock()
    r.status_code = status_code
    r.content = content
    return r


def nupkg(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


class FakeWeb:
    """Routes session.get calls to canned responses by URL."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append(url)
        return self.routes.get(url, response(404))


def build_orchestrator(tmp_path, web, patterns=()):
    session = MagicMock()
    session.get.side_effect = web.get
    resolver = LicenseResolver(
        url_service=UrlLicenseService(session),
        nuget_service=NuGetLicenseService(session),
        github_service=GitHubLicenseService(session),
    )
    return LicenseDownloadOrchestrator(
        sbom_reader=SbomReader(),
        resolver=resolver,
        storage=LicenseStorage(tmp_path / 'licenses'),
        exclusions=ExclusionMatcher.compile(patterns),
        workers=4,
    )


def write_cyclonedx(path, components):
    path.write_text(
        json.dumps({'bomFormat': 'CycloneDX', 'specVersion': '1.5', 'components': components}),
        encoding='utf-8',
    )
    return path


def github_license_body(name='LICENSE'):
    return json.dumps({
        'name': name,
        'content': base64.b64encode(MIT_TEXT).decode(),
        'encoding': 'base64',
        'license': {'spdx_id': 'MIT', 'name': 'MIT License'},
    }).encode()


class TestEndToEnd:
    """Full runs from an SBOM file to license files on disk."""

    def test_github_license_saved(self, tmp_path):
        web = FakeWeb({
            'https://api.github.com/repos/acme/widget/license': response(200, github_license_body()),
        })
        orchestrator = build_orchestrator(tmp_path, web)
        sbom = write_cyclonedx(tmp_path / 'sbom.json', [{
            'name': 'Acme.Widget',
            'version': '1.0.0',
            'externalReferences': [{'type': 'vcs', 'url': 'https://github.com/acme/widget'}],
        }])

        summary = orchestrator.execute(sbom)

        assert summary.total_components == 1
        assert summary.excluded_packages == 0
        assert summary.successful_downloads == 1
        assert summary.failed_downloads == 0
        assert summary.fatal_error is None
        assert not summary.has_errors
        saved = tmp_path / 'licenses' / 'Acme.Widget-1.0.0.txt'
        assert saved.read_bytes() == MIT_TEXT
        assert summary.total_files_created == 1
        assert summary.total_size_bytes == len(MIT_TEXT)
        assert summary.output_directory == str(tmp_path / 'licenses')

    def test_github_markdown_license_keeps_extension(self, tmp_path):
        web = FakeWeb({
            'https://api.github.com/repos/acme/widget/license': response(200, github_license_body('LICENSE.md')),
        })
        orchestrator = build_orchestrator(tmp_path, web)
        sbom = write_cyclonedx(tmp_path / 'sbom.json', [{
            'name': 'Acme.Widget',
            'version': '1.0.0',
            'externalReferences': [{'type': 'vcs', 'url': 'https://github.com/acme/widget'}],
        }])

        orchestrator.execute(sbom)

        assert (tmp_path / 'licenses' / 'Acme.Widget-1.0.0.md').exists()

    def test_excluded_package_is_never_resolved(self, tmp_path):
        web = FakeWeb({
            'https://api.nuget.org/v3-flatcontainer/newtonsoft.json/13.0.3/newtonsoft.json.13.0.3.nupkg':
                response(200, nupkg({'LICENSE.md': b'The MIT License (MIT)'})),
        })
        orchestrator = build_orchestrator(tmp_path, web, patterns=['Microsoft.*'])
        sbom = write_cyclonedx(tmp_path / 'sbom.json', [
            {'name': 'Microsoft.Extensions.Logging', 'version': '8.0.0'},
            {'name': 'Newtonsoft.Json', 'version': '13.0.3'},
        ])

        summary = orchestrator.execute(sbom)

        assert summary.total_components == 2
        assert summary.excluded_packages == 1
        assert summary.successful_downloads == 1
        assert summary.failed_downloads == 0
        assert not any('microsoft' in url for url in web.requested)
        assert (tmp_path / 'licenses' / 'Newtonsoft.Json-13.0.3.md').exists()

    def test_no_license_anywhere(self, tmp_path):
        web = FakeWeb({
            'https://api.nuget.org/v3-flatcontainer/acme.widget/1.0.0/acme.widget.1.0.0.nupkg':
                response(200, nupkg({'Acme.Widget.nuspec': b'<package/>', 'lib/a.dll': b'\x00'})),
        })
        orchestrator = build_orchestrator(tmp_path, web)
        sbom = write_cyclonedx(tmp_path / 'sbom.json', [
            {'name': 'Acme.Widget', 'version': '1.0.0', 'purl': 'pkg:nuget/garbage'},
        ])

        summary = orchestrator.execute(sbom)

        assert summary.successful_downloads == 0
        assert summary.failed_downloads == 1
        assert summary.failed_components == ['Acme.Widget: No license file found']
        assert summary.has_errors

    def test_missing_sbom_is_fatal(self, tmp_path):
        web = FakeWeb()
        orchestrator = build_orchestrator(tmp_path, web)

        summary = orchestrator.execute(tmp_path / 'missing.json')

        assert summary.fatal_error is not None
        assert summary.total_components == 0
        assert summary.has_errors
        assert web.requested == []

    def test_unsupported_sbom_is_fatal(self, tmp_path):
        orchestrator = build_orchestrator(tmp_path, FakeWeb())
        path = tmp_path / 'syft.json'
        path.write_text(json.dumps({'artifacts': []}), encoding='utf-8')

        summary = orchestrator.execute(path)

        assert 'Unknown SBOM format' in summary.fatal_error


@pytest.fixture
def resolver():
    return MagicMock()


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.stats.return_value.total_files = 0
    storage.stats.return_value.total_size_bytes = 0
    storage.stats.return_value.output_directory = 'out'
    storage.stats.return_value.size_formatted = '0 B'
    return storage


def make_orchestrator(resolver, storage, patterns=()):
    return LicenseDownloadOrchestrator(
        sbom_reader=MagicMock(),
        resolver=resolver,
        storage=storage,
        exclusions=ExclusionMatcher.compile(patterns),
    )


def test_save_failure_counts_as_component_failure(resolver, storage):
    component = Component(name='Acme', version='1.0')
    resolver.resolve.return_value = LicenseDownloadResult(
        success=True, component=component, content=b'x', original_file_name='LICENSE',
    )
    storage.save.return_value = None

    summary = make_orchestrator(resolver, storage).run([component])

    assert summary.failed_downloads == 1
    assert summary.failed_components == ['Acme: Failed to save file']


def test_successful_result_carries_source(resolver, storage, tmp_path):
    component = Component(name='Acme', version='1.0')
    resolver.resolve.return_value = LicenseDownloadResult(
        success=True, component=component, content=b'x', source='nuget-purl', spdx_id='MIT',
    )
    storage.save.return_value = tmp_path / 'Acme-1.0.txt'

    result = make_orchestrator(resolver, storage).process_component(component)

    assert result.success
    assert result.source == 'nuget-purl'
    assert result.spdx_id == 'MIT'
    assert result.path == tmp_path / 'Acme-1.0.txt'


def test_unexpected_error_is_isolated(resolver, storage, tmp_path):
    good = Component(name='Good', version='1.0')
    bad = Component(name='Bad', version='1.0')

    def resolve(component):
        if component.name == 'Bad':
            raise RuntimeError('kaboom')
        return LicenseDownloadResult(success=True, component=component, content=b'x')

    resolver.resolve.side_effect = resolve
    storage.save.return_value = tmp_path / 'Good-1.0.txt'

    summary = make_orchestrator(resolver, storage).run([good, bad])

    assert summary.successful_downloads == 1
    assert summary.failed_components == ['Bad: kaboom']


def test_counts_add_up(resolver, storage, tmp_path):
    components = [Component(name=f"Pkg{i}", version='1.0') for i in range(20)]
    components += [Component(name=f"System.Pkg{i}", version='1.0') for i in range(5)]

    def resolve(component):
        index = int(component.name.removeprefix('Pkg'))
        if index % 3 == 0:
            return LicenseDownloadResult.failed(component)
        return LicenseDownloadResult(success=True, component=component, content=b'x')

    resolver.resolve.side_effect = resolve
    storage.save.return_value = tmp_path / 'file.txt'

    summary = make_orchestrator(resolver, storage, patterns=['System.*']).run(components)

    assert summary.total_components == 25
    assert summary.excluded_packages == 5
    assert summary.successful_downloads + summary.failed_downloads == 20
    assert summary.failed_downloads == 7
    assert set(summary.failed_components) == {
        f"Pkg{i}: No license file found" for i in range(0, 20, 3)
    }
    storage.stats.assert_called_once()


def test_progress_callback_called_per_component(resolver, storage, tmp_path):
    resolver.resolve.side_effect = lambda c: LicenseDownloadResult.failed(c)
    seen = []

    make_orchestrator(resolver, storage).run(
        [Component(name='A'), Component(name='B')],
        on_progress=lambda result: seen.append(result.component.name),
    )

    assert sorted(seen) == ['A', 'B']


def test_empty_component_list(resolver, storage):
    summary = make_orchestrator(resolver, storage).run([])

    assert summary.total_components == 0
    assert not summary.has_errors
    resolver.resolve.assert_not_called()
