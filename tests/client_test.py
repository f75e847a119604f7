from sbomlicenses.core.client import get_http_client


def test_get_http_client_returns_session(tmp_path):
    """Test get_http_client returns a requests Session."""
    session = get_http_client(cache_name=str(tmp_path / 'cache.sqlite3'))
    assert hasattr(session, 'get')
    assert callable(session.get)


def test_get_http_client_has_adapters(tmp_path):
    """Test session has http and https adapters mounted."""
    session = get_http_client(cache_name=str(tmp_path / 'cache.sqlite3'))
    assert 'https://' in session.adapters
    assert 'http://' in session.adapters


def test_get_http_client_does_not_retry(tmp_path):
    """Failed requests are left to the license source fallback."""
    session = get_http_client(cache_name=str(tmp_path / 'cache.sqlite3'))
    adapter = session.get_adapter('https://api.nuget.org')
    assert adapter.max_retries.total == 0


def test_get_http_client_user_agent(tmp_path):
    session = get_http_client(cache_name=str(tmp_path / 'cache.sqlite3'), user_agent='Test/1.0')
    assert session.headers['User-Agent'] == 'Test/1.0'


def test_get_http_client_creates_cache_dir(tmp_path):
    cache = tmp_path / 'nested' / 'cache.sqlite3'
    get_http_client(cache_name=str(cache))
    assert cache.parent.is_dir()


def test_response_hook_registered(tmp_path):
    session = get_http_client(cache_name=str(tmp_path / 'cache.sqlite3'))
    assert len(session.hooks['response']) >= 1
