from os.path import dirname
from sys import path

from lxml import etree


# Add this project to the Python path.
path.append(dirname(dirname(__file__)))


NS = {
    'sm': 'http://www.sitemaps.org/schemas/sitemap/0.9',
    'news': 'http://www.google.com/schemas/sitemap-news/0.9',
}


def parse_xml(path):
    ''' Parse an XML file and return its root element. '''
    return etree.parse(str(path)).getroot()


def url_locs(path):
    ''' Return the ``<loc>`` of each ``<url>`` in a sitemap file. '''
    return parse_xml(path).xpath('sm:url/sm:loc/text()', namespaces=NS)
