'''
A small wrapper around :class:`lxml.etree.xmlfile` that can keep a document
open across many calls, which the sitemap builder needs because each entry is
written by a separate ``add_item()`` call.
'''
from contextlib import ExitStack
import logging

from lxml import etree


logger = logging.getLogger(__name__)
INDENT = '  '


class XmlDocumentWriter:
    '''
    An incrementally written XML document with a single root element.

    The file handle, the ``xmlfile`` context, and the root element context are
    all held on one exit stack, so the file is released by :meth:`close` or
    :meth:`abort` no matter how far the document got.

    Tags are Clark notation strings, e.g. ``{http://example.com/ns}tag``.
    Prefixes are taken from the root element's nsmap.
    '''
    def __init__(self, path, root_tag, nsmap=None):
        '''
        Open ``path`` for writing, then write the XML declaration and root
        start tag.

        :param pathlib.Path path:
        :param str root_tag:
        :param dict nsmap: Namespace prefix map for the root element.
        :raises OSError: If the file cannot be opened or written.
        '''
        self.path = path
        self._stack = ExitStack()
        try:
            file = self._stack.enter_context(open(path, 'wb'))
            self._xf = self._stack.enter_context(
                etree.xmlfile(file, encoding='utf-8'))
            self._xf.write_declaration()
            self._stack.enter_context(self._xf.element(root_tag, nsmap=nsmap))
        except BaseException as exc:
            self._stack.__exit__(type(exc), exc, exc.__traceback__)
            raise
        self._closed = False
        logger.debug('Opened XML document %s', path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()
        else:
            self.abort(exc_type, exc_value, traceback)

    @property
    def closed(self):
        return self._closed

    def element(self, tag, depth):
        '''
        Return a context manager that writes a container element.

        :param str tag:
        :param int depth: Nesting depth used for indentation; root children
            are at depth 1.
        '''
        self._newline(depth)
        return _Container(self, tag, depth)

    def leaf(self, tag, text, depth):
        ''' Write an element that contains only text. '''
        self._newline(depth)
        with self._xf.element(tag):
            self._xf.write(str(text))

    def close(self):
        ''' Write the root end tag and close the file. '''
        if self._closed:
            return
        try:
            self._xf.write('\n')
        except BaseException as exc:
            self.abort(type(exc), exc, exc.__traceback__)
            raise
        self._closed = True
        self._stack.close()
        logger.debug('Closed XML document %s', self.path)

    def abort(self, exc_type=None, exc_value=None, traceback=None):
        '''
        Close the file without completing the document.

        The exception details are handed to the stacked contexts so that lxml
        skips its end-of-document checks.
        '''
        if self._closed:
            return
        self._closed = True
        if exc_type is None:
            exc_type, exc_value = RuntimeError, RuntimeError('aborted')
        try:
            self._stack.__exit__(exc_type, exc_value, traceback)
        except Exception:
            logger.exception('Error while aborting XML document %s', self.path)
        logger.warning('Abandoned incomplete XML document %s', self.path)

    def _newline(self, depth):
        self._xf.write('\n' + INDENT * depth)


class _Container:
    ''' Context manager for a nested element. '''
    def __init__(self, writer, tag, depth):
        self._writer = writer
        self._context = writer._xf.element(tag)
        self._depth = depth

    def __enter__(self):
        self._context.__enter__()
        return self._writer

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self._writer._newline(self._depth)
        return self._context.__exit__(exc_type, exc_value, traceback)
