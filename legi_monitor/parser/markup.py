"""
Query layer over a parsed HTML document.

The timeline parser only needs a handful of capabilities (CSS lookups,
attribute access, normalised text, class tests and inner HTML), so they are
gathered here and backed by BeautifulSoup.
"""
import re

from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r'\s+')


class Markup:

    def __init__(self, html):
        self.soup = BeautifulSoup(html or "", 'html.parser')

    def find_all(self, selector, scope=None):
        """All nodes matching *selector*, in document order."""
        return (scope if scope is not None else self.soup).select(selector)

    def find_first(self, selector, scope=None):
        return (scope if scope is not None else self.soup).select_one(selector)

    def exists(self, selector, scope=None):
        return self.find_first(selector, scope) is not None

    @staticmethod
    def attr(node, name):
        if node is None:
            return None
        value = node.get(name)
        if isinstance(value, list):
            return ' '.join(value)
        return value

    @staticmethod
    def text(node):
        """Node text with runs of whitespace collapsed; '' for a missing node."""
        if node is None:
            return ""
        return _WHITESPACE_RE.sub(' ', node.get_text()).strip()

    @staticmethod
    def has_class(node, name):
        return name in (node.get('class') or [])

    @staticmethod
    def inner_html(node):
        if node is None:
            return ""
        return node.decode_contents()
