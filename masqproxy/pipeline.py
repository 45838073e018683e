"""Fetch a target page under a session identity and hand it back rewritten."""
import logging
import time
from dataclasses import dataclass

import requests

from .errors import BadRequest, PolicyDenied, UpstreamFailure
from .rewrite import rewrite
from .robots import origin_of
from .transport import get_within

logger = logging.getLogger(__name__)

# Query value the front end sends for "no referer"
NO_REFERER = ' '


@dataclass
class ProxyResult:
    html: str
    session_id: str
    upstream_status: int


def normalize_url(target_url):
    if target_url.lower().startswith(('http://', 'https://')):
        return target_url
    return f"https://{target_url}"


def resolve_referer(referer):
    if not referer or referer == NO_REFERER:
        return ''
    return referer


def set_cookie_lines(resp):
    """Every Set-Cookie line of a response, unmerged."""
    raw = getattr(resp, 'raw', None)
    headers = getattr(raw, 'headers', None)
    if headers is not None and hasattr(headers, 'getlist'):
        return headers.getlist('Set-Cookie')
    value = resp.headers.get('Set-Cookie')
    return [value] if value else []


class FetchPipeline:
    def __init__(self, sessions, robots, http_factory=requests.Session, timeout=10.0, max_redirects=5,
                 timer=time.monotonic):
        self.sessions = sessions
        self.robots = robots
        # a fresh requests.Session per fetch so no cookie jar is shared between clients
        self.http_factory = http_factory
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.timer = timer

    def outbound_headers(self, session, referer):
        headers = dict(session.identity.headers)
        referer = resolve_referer(referer)
        if referer:
            headers['Referer'] = referer
        else:
            headers.pop('Referer', None)
        cookie = self.sessions.cookie_header(session.id)
        if cookie:
            headers['Cookie'] = cookie
        return headers

    def proxy(self, target_url, referer=None, session_id=None) -> ProxyResult:
        if not target_url:
            raise BadRequest('Missing "url" query parameter.')

        full_url = normalize_url(target_url)
        logger.info(f"Proxy request for {full_url} (referer={resolve_referer(referer)!r})")

        if not self.robots.is_allowed(full_url):
            raise PolicyDenied('Access to this URL is disallowed by robots.txt.')

        with self.sessions.lease(session_id) as session:
            headers = self.outbound_headers(session, referer)
            try:
                with self.http_factory() as http:
                    http.max_redirects = self.max_redirects
                    resp, body = get_within(
                        http, full_url, self.timeout, self.timer, headers=headers, allow_redirects=True,
                    )
            except requests.RequestException as e:
                logger.warning(f"Error fetching URL {full_url}: {e}")
                raise UpstreamFailure.from_exception(e) from e
            logger.info(f"{full_url} answered {resp.status_code}")

            for hop in list(resp.history) + [resp]:
                for line in set_cookie_lines(hop):
                    self.sessions.record_cookie(session.id, line)

            html = rewrite(body, origin_of(full_url))
            return ProxyResult(html=html, session_id=session.id, upstream_status=resp.status_code)
