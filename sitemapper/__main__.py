import argparse
import json
import logging
import sys

from . import SitemapError
from .builder import SitemapBuilder
from .config import builder_config, get_config
from .entry import InvalidEntryError, UrlEntry


logger = logging.getLogger('sitemapper')


def configure_logging(log_level, error_log):
    ''' Set default format and output stream for logging. '''
    log_format = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    log_date_format = '%Y-%m-%d %H:%M:%S'
    log_formatter = logging.Formatter(log_format, log_date_format)
    log_level = getattr(logging, log_level.upper())
    log_handler = logging.StreamHandler(sys.stderr)
    log_handler.setFormatter(log_formatter)
    log_handler.setLevel(log_level)
    logger = logging.getLogger()
    logger.addHandler(log_handler)
    logger.setLevel(log_level)

    if error_log is not None:
        exc_handler = logging.FileHandler(error_log)
        exc_handler.setFormatter(log_formatter)
        exc_handler.setLevel(logging.ERROR)
        logger.addHandler(exc_handler)


def get_args(argv=None):
    ''' Parse command line arguments. '''
    arg_parser = argparse.ArgumentParser(prog='sitemapper',
        description='Write sitemap files for a list of URLs. Each input line'
        ' is either a location, e.g. /about, or a JSON object with the fields'
        ' location, priority, changefreq, lastmod, and news.')
    arg_parser.add_argument(
        'input',
        nargs='?',
        type=argparse.FileType('r', encoding='utf-8'),
        default=sys.stdin,
        help='File to read entries from (default: stdin)'
    )
    arg_parser.add_argument(
        '--log-level',
        default='warning',
        metavar='LEVEL',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        help='Set logging verbosity (default: warning)'
    )
    arg_parser.add_argument(
        '--error-log',
        help='Copy error logs to the specified file.'
    )
    arg_parser.add_argument(
        '--domain',
        help='Root URL of the website, e.g. https://example.com'
    )
    arg_parser.add_argument(
        '--path',
        help='Directory to write sitemap files to'
    )
    arg_parser.add_argument(
        '--filename',
        help='Filename stem (default: sitemap)'
    )
    arg_parser.add_argument(
        '--variant',
        choices=['webpages', 'news'],
        help='Kind of sitemap (default: webpages)'
    )
    arg_parser.add_argument(
        '--items-per-file',
        type=int,
        metavar='N',
        help='Start a new file after this many entries (default: 50000)'
    )
    arg_parser.add_argument(
        '--index',
        metavar='PREFIX',
        help='Write a sitemap index, using PREFIX as the URL of the sitemap'
            ' files.'
    )
    return arg_parser.parse_args(argv)


def read_entries(lines):
    '''
    Parse input lines into URL entries. Blank lines are skipped.

    :param lines: An iterable of strings.
    :returns: A generator of :class:`UrlEntry`.
    :raises InvalidEntryError: If a JSON line is malformed.
    '''
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        if not line.startswith('{'):
            yield UrlEntry(line)
            continue
        try:
            doc = json.loads(line)
        except json.JSONDecodeError as exc:
            raise InvalidEntryError(f'Line {line_no}: {exc}') from exc
        yield UrlEntry.from_doc(doc)


def run(args):
    ''' Build sitemaps as directed by ``args``. Returns the exit status. '''
    config = get_config()
    if config.has_section('sitemap'):
        section = config['sitemap']
    else:
        section = config[config.default_section]

    try:
        builder = SitemapBuilder.from_config(builder_config(section,
            domain=args.domain, path=args.path, filename=args.filename,
            variant=args.variant, items_per_file=args.items_per_file))
        with builder:
            for entry in read_entries(args.input):
                builder.add_item(entry)
            if args.index is None:
                builder.finalize_current_file()
            else:
                builder.build_index(args.index)
    except (SitemapError, ValueError) as exc:
        logger.error('%s', exc)
        return 1

    logger.info('Wrote %d items to %d files', builder.items_added,
        builder.files_opened)
    return 0


def main():
    ''' Run the sitemap command line tool. '''
    args = get_args()
    configure_logging(args.log_level, args.error_log)
    sys.exit(run(args))


if __name__ == '__main__':
    main()
