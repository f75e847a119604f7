import logging
import os
import sys
from typing import Any

import structlog
from rich.console import Console

# Shared console for tables, panels and progress bars
console = Console()

LEVEL_STYLES = {
    'debug': 'dim',
    'info': 'green',
    'warning': 'yellow',
    'error': 'bold red',
    'critical': 'bold magenta',
}

# Event keys whose values must never reach a log sink
SECRET_KEYS = frozenset({'token', 'authorization', 'github_token'})

# Chatty libraries underneath the HTTP session
NOISY_LOGGERS = ('urllib3', 'requests_cache')


def redact_secrets(logger, method_name, event_dict):
    for key in event_dict.keys() & SECRET_KEYS:
        if event_dict[key]:
            event_dict[key] = '*****'
    return event_dict


def drop_style_processor(logger, method_name, event_dict):
    """Strip the console-only ``_style`` hint before JSON rendering."""
    event_dict.pop('_style', None)
    return event_dict


class ComponentLineRenderer:
    """
    Print one rich line per event on stderr.

    Most events of a run concern a single SBOM component, so a
    ``component`` field is pulled out of the key/value tail and shown as a
    ``[name]`` tag right after the level::

        12:01:07 resolver_service info     [Newtonsoft.Json] License found source='nuget'
    """

    def __init__(self, stream_console: Console | None = None):
        self._console = stream_console or Console(stderr=True)

    def __call__(self, logger, name, event_dict):
        line_style = event_dict.pop('_style', None)
        level = event_dict.pop('level', 'info')
        event = str(event_dict.pop('event', ''))
        component = event_dict.pop('component', None)
        timestamp = event_dict.pop('timestamp', None)
        logger_name = event_dict.pop('logger', None)
        exception = event_dict.pop('exception', None)
        event_dict.pop('exc_info', None)

        style = LEVEL_STYLES.get(level, 'white')
        head = [f"[dim]{timestamp}[/dim]"] if timestamp else []
        if logger_name:
            head.append(f"[bold]{logger_name}[/bold]")
        head.append(f"[{style}]{level:<8}[/{style}]")
        if component:
            head.append(f"[cyan]\\[{component}][/cyan]")
        head.append(event)
        tail = [f"[cyan]{k}[/cyan]=[green]{v!r}[/green]" for k, v in event_dict.items()]

        message = ' '.join(head + tail)
        if exception:
            message += f"\n[red]{exception}[/red]"
        self._console.print(message, style=line_style, highlight=False)
        raise structlog.DropEvent


def setup_logging(level: str = 'INFO', json_logs: bool | None = None) -> None:
    """
    Configure structlog for one CLI run.

    JSON lines are emitted when ``json_logs`` is set or, by default, when
    ``SBOM_LICENSES_ENV=production``.
    """
    if json_logs is None:
        json_logs = os.getenv('SBOM_LICENSES_ENV') == 'production'

    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=level)
    if level.upper() != 'DEBUG':
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_secrets,
    ]
    if json_logs:
        processors += [
            structlog.processors.TimeStamper(fmt='iso'),
            drop_style_processor,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.processors.TimeStamper(fmt='%H:%M:%S'),
            structlog.processors.format_exc_info,
            ComponentLineRenderer(),
        ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
