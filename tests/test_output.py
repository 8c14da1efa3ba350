import io
from pathlib import Path

from rich.console import Console

from mailscan.maildir import MessageSummary
from mailscan.output import COLOR_NAMES, format_summary, list_colors, parse_color


def test_parse_color():
    assert parse_color('cyan') == 'cyan'
    assert parse_color('Bright_Blue') == 'bright_blue'
    assert parse_color('light cyan') == 'bright_cyan'
    assert parse_color('#ff0000') == '#ff0000'
    assert parse_color('no-such-color', 'magenta') == 'magenta'
    assert parse_color(None, 'red') == 'red'


def test_list_colors_sorted():
    buf = io.StringIO()
    list_colors(Console(file=buf, color_system=None))
    out = buf.getvalue().splitlines()
    assert out == [f'  {name}' for name in sorted(COLOR_NAMES)]


def test_format_summary_with_fallbacks():
    summary = MessageSummary('INBOX', Path('x'), {'from': 'Bob <bob@example.test>'})
    text = format_summary(summary, ['from', 'subject'])
    assert text.plain == 'INBOX: Bob <bob@example.test> / no subject'


def test_format_summary_extra_columns():
    summary = MessageSummary('Work', Path('x'), {'from': 'a', 'subject': 'b', 'date': 'c'})
    text = format_summary(summary, ['from', 'subject', 'date'])
    assert text.plain == 'Work: a / b / c'


def test_format_summary_error():
    summary = MessageSummary('INBOX', Path('x'), error='[Errno 13] Permission denied')
    text = format_summary(summary, ['from', 'subject'])
    assert text.plain == 'INBOX: <No subject> ([Errno 13] Permission denied)'


def test_format_summary_applies_styles():
    summary = MessageSummary('INBOX', Path('x'), {'from': 'a', 'subject': 'b'})
    text = format_summary(summary, ['from', 'subject'], {'mailbox': 'magenta', 'subject': 'bright_cyan'})
    styled = {text.plain[span.start:span.end]: str(span.style) for span in text.spans}
    assert styled == {'INBOX': 'magenta', 'b': 'bright_cyan'}


def test_markup_in_headers_is_not_interpreted():
    summary = MessageSummary('INBOX', Path('x'), {'from': '[bold]x[/bold]', 'subject': 's'})
    buf = io.StringIO()
    Console(file=buf, color_system=None, soft_wrap=True).print(format_summary(summary, ['from', 'subject']))
    assert buf.getvalue() == 'INBOX: [bold]x[/bold] / s\n'
