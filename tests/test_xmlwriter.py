import pytest

from . import parse_xml
from sitemapper.xmlwriter import XmlDocumentWriter


NS = 'http://example.com/ns'


def tag(name):
    return f'{{{NS}}}{name}'


def test_write_document(tmp_path):
    path = tmp_path / 'doc.xml'
    with XmlDocumentWriter(path, tag('root'), {None: NS}) as doc:
        with doc.element(tag('item'), 1):
            doc.leaf(tag('name'), 'a & b', 2)
            doc.leaf(tag('count'), 3, 2)
    assert doc.closed

    root = parse_xml(path)
    assert root.tag == tag('root')
    item = root[0]
    assert [child.text for child in item] == ['a & b', '3']
    assert path.read_text(encoding='utf-8').endswith(
        '<root xmlns="http://example.com/ns">\n'
        '  <item>\n'
        '    <name>a &amp; b</name>\n'
        '    <count>3</count>\n'
        '  </item>\n'
        '</root>')


def test_prefixed_namespace(tmp_path):
    path = tmp_path / 'doc.xml'
    other = 'http://example.com/other'
    with XmlDocumentWriter(path, tag('root'), {None: NS, 'o': other}) as doc:
        doc.leaf(f'{{{other}}}thing', 'x', 1)
    assert '<o:thing>x</o:thing>' in path.read_text(encoding='utf-8')


def test_close_is_idempotent(tmp_path):
    doc = XmlDocumentWriter(tmp_path / 'doc.xml', tag('root'), {None: NS})
    doc.close()
    doc.close()
    assert doc.closed
    assert len(parse_xml(tmp_path / 'doc.xml')) == 0


def test_abort_on_exception(tmp_path):
    with pytest.raises(ValueError):
        with XmlDocumentWriter(tmp_path / 'doc.xml', tag('root'),
                {None: NS}) as doc:
            raise ValueError('boom')
    assert doc.closed


def test_cannot_open(tmp_path):
    with pytest.raises(FileNotFoundError):
        XmlDocumentWriter(tmp_path / 'missing' / 'doc.xml', tag('root'))
