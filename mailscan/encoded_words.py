"""Decode RFC 2047 encoded words (`=?charset?Q|B?text?=`) found in header values.

Decoding is best-effort: a token that cannot be decoded is kept verbatim and
the failure is logged, so callers always get a string back.
"""
import base64
import binascii
import codecs
import logging
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

ENCODED_WORD_RE = re.compile(r'=\?([^?]+)\?([^?]+)\?(.*?)\?=')

FALLBACK_CHARSET = 'windows-1252'

# WHATWG encoding labels whose meaning differs from Python's codec of the same
# name, or that Python does not know at all
_WHATWG_LABELS = {
    'utf-8': ('unicode-1-1-utf-8', 'unicode11utf8', 'unicode20utf8', 'utf8', 'x-unicode20utf8'),
    'cp866': ('866', 'cp866', 'csibm866', 'ibm866'),
    'iso8859-8': ('csiso88598i', 'iso-8859-8-i', 'logical'),
    'koi8-u': ('koi8-ru', 'koi8-u'),
    'mac-roman': ('csmacintosh', 'mac', 'macintosh', 'x-mac-roman'),
    'mac-cyrillic': ('x-mac-cyrillic', 'x-mac-ukrainian'),
    'cp874': ('dos-874', 'iso-8859-11', 'iso8859-11', 'iso885911', 'tis-620', 'windows-874'),
    'cp1250': ('x-cp1250',),
    'cp1251': ('x-cp1251',),
    FALLBACK_CHARSET: (
        'ansi_x3.4-1968', 'ascii', 'cp1252', 'cp819', 'csisolatin1', 'ibm819', 'iso-8859-1',
        'iso-ir-100', 'iso8859-1', 'iso88591', 'iso_8859-1', 'iso_8859-1:1987', 'l1', 'latin1',
        'latin-1', 'us-ascii', 'x-cp1252',
    ),
    'cp1253': ('x-cp1253',),
    'cp1254': (
        'cp1254', 'csisolatin5', 'iso-8859-9', 'iso-ir-148', 'iso8859-9', 'iso88599',
        'iso_8859-9', 'iso_8859-9:1989', 'l5', 'latin5', 'x-cp1254',
    ),
    'cp1255': ('x-cp1255',),
    'cp1256': ('x-cp1256',),
    'cp1257': ('x-cp1257',),
    'cp1258': ('x-cp1258',),
    # GBK labels decode with the gb18030 superset
    'gb18030': (
        'chinese', 'csgb2312', 'csiso58gb231280', 'gb2312', 'gb_2312', 'gb_2312-80', 'gbk',
        'iso-ir-58', 'x-gbk',
    ),
    'big5hkscs': ('big5', 'big5-hkscs', 'cn-big5', 'csbig5', 'x-x-big5'),
    'euc-jp': ('cseucpkdfmtjapanese', 'x-euc-jp'),
    'cp932': (
        'csshiftjis', 'ms932', 'ms_kanji', 'shift-jis', 'shift_jis', 'sjis', 'windows-31j',
        'x-sjis',
    ),
    'cp949': (
        'cseuckr', 'csksc56011987', 'euc-kr', 'iso-ir-149', 'korean', 'ks_c_5601-1987',
        'ks_c_5601-1989', 'ksc5601', 'ksc_5601', 'windows-949',
    ),
    'utf-16-be': ('unicodefffe',),
    'utf-16-le': ('csunicode', 'iso-10646-ucs-2', 'ucs-2', 'unicode', 'unicodefeff', 'utf-16'),
}

_CHARSET_ALIASES = {label: codec for codec, labels in _WHATWG_LABELS.items() for label in labels}

# Codecs that exist in Python but are not character sets
_UNUSABLE_CODECS = {'undefined', 'idna', 'punycode', 'raw-unicode-escape', 'unicode-escape'}


class EncodedWordError(ValueError):
    """A single encoded word could not be decoded."""


class EncodedWord(NamedTuple):
    charset: str
    encoding: str
    payload: str
    text: str

    @classmethod
    def from_match(cls, match: re.Match) -> 'EncodedWord':
        return cls(match.group(1), match.group(2), match.group(3), match.group(0))


def resolve_charset(label: str) -> codecs.CodecInfo:
    """Return the codec for a MIME charset label, falling back to Windows-1252.

    Lookup is case-insensitive and ignores an RFC 2231 language suffix
    (``utf-8*en``). Unknown labels never raise.
    """
    name = (label or '').split('*', 1)[0].strip().lower()
    name = _CHARSET_ALIASES.get(name, name)
    if not name:
        return codecs.lookup(FALLBACK_CHARSET)
    try:
        info = codecs.lookup(name)
    except (LookupError, ValueError):
        # ValueError: labels with an embedded NUL
        return codecs.lookup(FALLBACK_CHARSET)
    # _is_text_encoding is private, but it is how codecs itself flags
    # bytes-to-bytes and str-to-str codecs such as base64 and rot13
    if not info._is_text_encoding or info.name in _UNUSABLE_CODECS:
        return codecs.lookup(FALLBACK_CHARSET)
    return info


def decode_transport(encoding: str, payload: str) -> bytes:
    """Undo the Q or B transport encoding of a payload."""
    kind = encoding.upper()
    if kind == 'Q':
        # a2b_qp leaves malformed escapes as literal text
        return binascii.a2b_qp(payload.encode('utf-8'))
    if kind == 'B':
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncodedWordError(f'base64 error: {e}') from e
    raise EncodedWordError(f'Unknown encoding type, {encoding}')


def transcode(charset: str, data: bytes) -> str:
    try:
        text = resolve_charset(charset).decode(data, 'replace')[0]
    except (UnicodeError, ValueError, TypeError) as e:
        raise EncodedWordError(f'charset error ({charset}): {e}') from e
    # Applied after B as well as Q
    return text.replace('_', ' ')


def decode_word(word: EncodedWord) -> str:
    return transcode(word.charset, decode_transport(word.encoding, word.payload))


def _replace_word(match: re.Match) -> str:
    word = EncodedWord.from_match(match)
    try:
        return decode_word(word)
    except EncodedWordError as e:
        logger.warning('Encoding error: %s (token %r)', e, word.text)
        return word.text


def decode_header_value(value: str) -> str:
    """Decode every encoded word in a raw header value.

    Text between encoded words, including whitespace, is kept as is.
    """
    return ENCODED_WORD_RE.sub(_replace_word, value)
