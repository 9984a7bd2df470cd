import hashlib
import time
from typing import Optional

from .errors import UnsupportedCharset


UTF8_NAMES = {'utf-8', 'utf8'}
LATIN1_NAMES = {'iso-8859-1', 'iso8859-1', 'latin-1', 'latin1', 'us-ascii', 'ascii'}


def now() -> int:
    """
    The current time, in whole seconds since the Unix epoch.
    """
    return int(time.time())


def stable_hash(text: str) -> int:
    # Python's builtin `hash()` is salted per process, so it can't name files that
    # outlive the process. Use the first 64 bits of a SHA-256 digest instead.
    digest = hashlib.sha256(text.encode('utf-8')).digest()
    return int.from_bytes(digest[:8], 'big')


def decode_text(payload: bytes, charset: Optional[str] = None) -> str:
    """
    Turn body bytes into text.

    Only UTF-8 and ISO-8859-1 are understood. Without a declared charset, UTF-8 is tried first and ISO-8859-1 is the
    fallback, which can decode any byte sequence.

    @param payload
      The raw bytes.
    @param charset
      The charset declared by the sender, if any.
    @throws UnsupportedCharset
      If `charset` names anything else.
    """
    if charset is not None:
        name = charset.strip().strip('"\'').lower()
        if name in LATIN1_NAMES:
            return payload.decode('iso-8859-1')
        if name not in UTF8_NAMES:
            raise UnsupportedCharset('Unsupported charset: {}'.format(charset))

    try:
        return payload.decode('utf-8')
    except UnicodeDecodeError:
        return payload.decode('iso-8859-1')
