"""
Turns the raw bytes read from a connection into a `Response`.

A response is split at the first blank line. The head gives the status and the
header table; the body is then de-chunked, decompressed and decoded to text,
in that order, according to the headers.
"""

import gzip
import logging
import re
import zlib
from typing import Optional, Tuple

from requests.structures import CaseInsensitiveDict

from .errors import MalformedChunk, UnsupportedContentEncoding, UnsupportedTransferEncoding
from .model import HttpStatusKind, Response
from .util import decode_text


logger = logging.getLogger(__name__)

SEPARATOR = b'\r\n\r\n'
CRLF = b'\r\n'
HEX_DIGITS = re.compile(rb'[0-9A-Fa-f]+')


def parse_response(raw: bytes) -> Response:
    head, separator, body = raw.partition(SEPARATOR)
    if not separator:
        logger.info('No blank line after the headers. Treating the whole response as headers.')

    status, headers = parse_head(head)
    logger.info('Parsed status {} with {} headers.'.format(status.name, len(headers)))

    return Response(status=status, headers=headers, body=decode_body(body, headers))


def parse_head(head: bytes) -> Tuple[HttpStatusKind, CaseInsensitiveDict]:
    # Conforming servers only send ASCII here. Latin-1 accepts any byte, so a
    # misbehaving server can't make header parsing blow up.
    lines = [line.rstrip('\r') for line in head.decode('iso-8859-1').split('\n')]
    status = parse_status(lines[0]) if lines else HttpStatusKind.UNSUPPORTED

    headers = CaseInsensitiveDict()
    for line in lines[1:]:
        name, colon, value = line.partition(':')
        if not colon:
            continue
        headers[name.strip().lower()] = value.strip()
    return status, headers


def parse_status(status_line: str) -> HttpStatusKind:
    # E.g. "HTTP/1.1 200 OK"
    tokens = status_line.split()
    if len(tokens) < 2:
        return HttpStatusKind.UNSUPPORTED
    return HttpStatusKind.from_code(tokens[1])


def decode_body(body: bytes, headers: CaseInsensitiveDict) -> str:
    transfer_encoding = headers.get('transfer-encoding')
    if transfer_encoding is not None:
        body = dechunk_as(body, transfer_encoding)

    content_encoding = headers.get('content-encoding')
    if content_encoding is not None:
        body = decompress(body, content_encoding)

    return decode_text(body, content_type_charset(headers.get('content-type')))


def dechunk_as(body: bytes, transfer_encoding: str) -> bytes:
    codings = [coding.strip().lower() for coding in transfer_encoding.split(',') if coding.strip()]
    for coding in codings:
        if coding not in ('chunked', 'identity'):
            raise UnsupportedTransferEncoding('Unsupported transfer encoding: {}'.format(transfer_encoding))
    if 'chunked' not in codings:
        return body
    return dechunk(body)


def dechunk(body: bytes) -> bytes:
    """
    Reassemble a chunked body.

    Each chunk is `<size in hex>[;extensions]\\r\\n<data>\\r\\n`. A chunk of size 0 ends the body, and whatever follows
    it (trailers) is dropped.

    @throws MalformedChunk
      If a size line is not hex, or the body ends before the terminating chunk.
    """
    chunks = []
    position = 0
    while True:
        line_end = body.find(CRLF, position)
        if line_end < 0:
            raise MalformedChunk('Missing chunk size line at offset {}'.format(position))

        size_text = body[position:line_end].split(b';', 1)[0].strip()
        if HEX_DIGITS.fullmatch(size_text) is None:
            raise MalformedChunk('Invalid chunk size: {!r}'.format(size_text))
        size = int(size_text, 16)

        if size == 0:
            return b''.join(chunks)

        data_start = line_end + len(CRLF)
        data_end = data_start + size
        if body[data_end:data_end + len(CRLF)] != CRLF:
            raise MalformedChunk('Chunk of size {} at offset {} is truncated'.format(size, position))

        chunks.append(body[data_start:data_end])
        position = data_end + len(CRLF)


def decompress(body: bytes, content_encoding: str) -> bytes:
    coding = content_encoding.strip().lower()
    if coding == 'identity':
        return body
    if coding not in ('gzip', 'x-gzip'):
        raise UnsupportedContentEncoding('Unsupported content encoding: {}'.format(content_encoding))

    logger.info('Decompressing gzip body of {} bytes.'.format(len(body)))
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as e:
        raise UnsupportedContentEncoding('Body is not valid gzip data') from e


def content_type_charset(content_type: Optional[str]) -> Optional[str]:
    if content_type is None:
        return None
    for parameter in content_type.split(';')[1:]:
        name, equals, value = parameter.partition('=')
        if equals and name.strip().lower() == 'charset':
            return value.strip()
    return None

