"""GitHub URL parsing and token utilities."""
from urllib.parse import urlsplit

import structlog
from rich.console import Console
from rich.panel import Panel

logger = structlog.get_logger('github')

GITHUB_HOST = 'github.com'
_SSH_PREFIX = f"git@{GITHUB_HOST}:"


def parse_github_url(url: str | None) -> tuple[str, str] | None:
    """
    Extract ``(owner, repo)`` from a GitHub repository URL.

    Handles:
        https://github.com/owner/repo
        https://github.com/owner/repo.git
        git@github.com:owner/repo.git
        github.com/owner/repo

    Returns None for anything that is not a github.com repository URL.
    """
    if not url:
        return None

    try:
        normalized = url.strip()
        if normalized.lower().startswith(_SSH_PREFIX):
            normalized = f"https://{GITHUB_HOST}/" + normalized[len(_SSH_PREFIX):]

        if not normalized.lower().startswith(('http://', 'https://')):
            normalized = 'https://' + normalized

        parts = urlsplit(normalized)
        host = parts.hostname or ''
        if host.lower() != GITHUB_HOST:
            return None

        segments = parts.path.strip('/').split('/')
        if len(segments) < 2 or not segments[0] or not segments[1]:
            return None

        owner, repo = segments[0], segments[1]
        if repo.lower().endswith('.git'):
            repo = repo[:-4]
        if not repo:
            return None
        return owner, repo
    except ValueError as e:
        logger.debug('Error parsing GitHub URL', url=url, error=str(e))
        return None


def warn_missing_token(token: str | None, console: Console | None = None) -> bool:
    """
    Print a hint when no GitHub token is configured.

    The license API works anonymously, but only with 60 requests per hour.
    Returns True when a token is present.
    """
    if token:
        return True

    console = console or Console(stderr=True)
    console.print(
        Panel(
            '[bold]No GitHub Token[/]\n\n'
            'License lookups through the GitHub API are limited to [bold]60 requests/hour[/] '
            'without a [bold blue]Personal Access Token[/].\n\n'
            '1. Create a token at: [link=https://github.com/settings/personal-access-tokens][blue]github.com/settings/personal-access-tokens[/link]\n'
            '2. Select [italic]Public repositories[/italic] under Repository access (no extra permissions needed).\n'
            '3. Set it as an environment variable:\n'
            '   [bold]export GITHUB_TOKEN=your_token_here[/]\n\n'
            'Alternatively, use the [bold]--token[/] command-line option.',
            title='[bold yellow]Warning[/]',
            title_align='left',
            border_style='yellow',
            padding=(1, 2),
        ),
    )
    return False
