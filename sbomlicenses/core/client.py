from datetime import timedelta
from pathlib import Path

import requests_cache
import structlog
from requests.adapters import HTTPAdapter

logger = structlog.get_logger('client')


def _log_response(response, *args, **kwargs):
    if getattr(response, '_logged', False):
        return
    response._logged = True

    log_kwargs = {
        'method': response.request.method,
        'url': response.url,
        'status': response.status_code,
        'content_length': len(response.content) if response.content else 0,
        'elapsed': f"{response.elapsed.total_seconds():.3f}s",
        'cached': getattr(response, 'from_cache', False),
    }

    # GitHub reports the remaining API budget on every response
    remaining = response.headers.get('X-RateLimit-Remaining')
    limit = response.headers.get('X-RateLimit-Limit')
    if remaining and limit:
        log_kwargs['ratelimit'] = f"{remaining}/{limit}"

    if log_kwargs['cached']:
        logger.debug('HTTP Request', _style='dim', **log_kwargs)
    else:
        logger.debug('HTTP Request', **log_kwargs)


def get_http_client(
    cache_name: str = '.requests-cache/licenses.sqlite3',
    expire_after: int = 86400,
    pool_size: int = 16,
    user_agent: str | None = None,
) -> requests_cache.CachedSession:
    """
    Returns a pooled requests session with response caching.

    Failed requests are never retried here; the license resolver's
    source fallback is the only recovery path.
    """
    cache_path = Path(cache_name)
    cache_path.parent.mkdir(parents=True, exist_ok=True)

    # 404 is cached too: a missing license stays missing for the expiry window
    session = requests_cache.CachedSession(
        cache_name=cache_name,
        backend='sqlite',
        expire_after=timedelta(seconds=expire_after),
        allowable_codes=[200, 404],
    )
    session.hooks['response'].append(_log_response)

    if user_agent:
        session.headers['User-Agent'] = user_agent

    adapter = HTTPAdapter(
        pool_connections=pool_size,
        pool_maxsize=pool_size,
        max_retries=0,
    )
    session.mount('https://', adapter)
    session.mount('http://', adapter)

    logger.debug(
        'Initialized Cached HTTP Client',
        cache_name=cache_name,
        expire_after=expire_after,
        pool_size=pool_size,
    )

    return session
