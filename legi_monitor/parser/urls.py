from urllib.parse import urljoin, urlparse


def resolve_url(base, href):
    """
    Resolve a link found in the timeline against the site root.

    Returns an empty string when there is no href, the href itself when it
    is already absolute, and the joined URL otherwise.
    """
    if not href:
        return ""
    href = href.strip()
    if not href:
        return ""
    if urlparse(href).scheme:
        return href
    return urljoin(base, href)
