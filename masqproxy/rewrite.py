from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Declaration, Doctype, NavigableString

REWRITTEN_ATTRIBUTES = ('src', 'href')


def is_root_relative(value):
    # "//host/path" is protocol-relative and already points at its own host
    return value.startswith('/') and not value.startswith('//')


def prologue_length(soup):
    """Number of leading doctype/declaration/whitespace nodes, which must stay first."""
    count = 0
    for node in soup.contents:
        if isinstance(node, (Doctype, Declaration)):
            count += 1
        elif isinstance(node, NavigableString) and not node.strip():
            count += 1
        else:
            break
    return count


def rewrite(html, origin_base_url):
    """Point a fetched page back at its origin so it renders from the proxy.

    Drops any <base>, inserts <base href=origin_base_url> first in <head> and
    makes root-relative src/href values absolute. Accepts text or bytes.
    """
    soup = BeautifulSoup(html, 'html.parser')

    for base in soup.find_all('base'):
        base.decompose()

    head = soup.head
    if head is None:
        head = soup.new_tag('head')
        if soup.html is not None:
            soup.html.insert(0, head)
        else:
            soup.insert(prologue_length(soup), head)
    head.insert(0, soup.new_tag('base', href=origin_base_url))

    for attr in REWRITTEN_ATTRIBUTES:
        for tag in soup.find_all(attrs={attr: True}):
            value = tag[attr]
            if isinstance(value, str) and is_root_relative(value):
                tag[attr] = urljoin(origin_base_url, value)

    return str(soup)
