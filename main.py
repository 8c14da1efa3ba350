import argparse
import logging
import os
import sys

from rich.console import Console

from mailscan.config import ConfigError, Settings, load_settings
from mailscan.log import setup_logging
from mailscan.maildir import scan_maildirs
from mailscan.output import format_summary, list_colors, parse_color

logger = logging.getLogger('mailscan')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='View emails in a maildir')
    parser.add_argument('inputs', nargs='*', help='maildir directories')
    parser.add_argument('-f', '--from-color', help='Color of From header', default=None)
    parser.add_argument('-m', '--mailbox-color', help='Color of mailbox name', default=None)
    parser.add_argument('-s', '--subject-color', help='Color of subject line', default=None)
    parser.add_argument('-l', '--list-colors', help='List available colors', action='store_true')
    parser.add_argument('-H', '--header', dest='headers', action='append', metavar='NAME',
                        help='Header to show (repeatable, replaces the default from/subject)')
    parser.add_argument('-j', '--jobs', type=int, default=None, help='Number of worker threads')
    parser.add_argument('--config', help='Path to a config file (JSON or "key value" lines)', default=None)
    parser.add_argument('--no-color', help='Disable colored output', action='store_true')
    parser.add_argument('-v', '--verbose', help='More logging (repeat for debug)', action='count', default=0)
    return parser


def resolve_styles(settings: Settings) -> dict:
    """Map output columns to rich color names, falling back to the defaults."""
    defaults = Settings()
    styles = {}
    for key in ('mailbox', 'from', 'subject'):
        attr = f'{key}_color'
        wanted = getattr(settings, attr)
        color = parse_color(wanted, None)
        if color is None:
            logger.warning('Unknown color %r for %s; using %s', wanted, key, getattr(defaults, attr))
            color = getattr(defaults, attr)
        styles[key] = color
    return styles


def apply_args(settings: Settings, args) -> Settings:
    # Command-line flags win over config file and environment
    for attr in ('from_color', 'mailbox_color', 'subject_color'):
        value = getattr(args, attr)
        if value is not None:
            setattr(settings, attr, value)
    if args.headers:
        settings.headers = [h.strip().lower() for h in args.headers if h.strip()] or settings.headers
    if args.jobs is not None:
        settings.jobs = max(args.jobs, 1)
    if args.verbose:
        settings.log_level = 'DEBUG' if args.verbose > 1 else 'INFO'
    return settings


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()
    try:
        settings = apply_args(load_settings(args.config), args)
    except ConfigError as e:
        logger.error('%s', e)
        return 2
    setup_logging(settings.log_level)

    if args.no_color:
        console = Console(color_system=None, highlight=False, soft_wrap=True)
    else:
        console = Console(force_terminal=True, highlight=False, soft_wrap=True)

    if args.list_colors:
        list_colors(console)
        return 0

    styles = resolve_styles(settings)

    try:
        for summary in scan_maildirs(args.inputs, settings.headers, jobs=settings.jobs):
            console.print(format_summary(summary, settings.headers, styles))
    except BrokenPipeError:
        # Output closed early (e.g. piped into head); silence the flush at exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
