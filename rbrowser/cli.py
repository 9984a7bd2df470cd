import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import loader
from .errors import BrowserError, UrlError
from .url import UrlType


logger = logging.getLogger(__name__)

LOG_LEVEL_VARIABLE = 'RBROWSER_LOG'


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_VARIABLE, 'WARNING').upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog='rbrowser', description='Fetch a URL and print it as text.')
    parser.add_argument('url', help='http(s)://..., view-source:http(s)://... or data:[<mediatype>][;base64],<data>')
    parser.add_argument('--cache-dir', type=Path, default=None, help='Directory for cached responses.')
    parser.add_argument('--timeout', type=float, default=None, help='Socket timeout in seconds.')
    args = parser.parse_args(argv)

    configure_logging()

    try:
        url_type = UrlType.parse(args.url)
    except UrlError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        text = loader.create(args.cache_dir, args.timeout).load(url_type)
    except BrowserError as e:
        logger.debug('Fetch failed', exc_info=True)
        print(e, file=sys.stderr)
        return 1

    print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
