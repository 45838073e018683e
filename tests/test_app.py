import pytest
import requests

from fakes import FakeHttp, FakeResponse
from masqproxy.app import create_app
from masqproxy.config import ProxyConfig
from masqproxy.pipeline import FetchPipeline
from masqproxy.robots import RobotsGate
from masqproxy.sessions import SessionStore

ROBOTS = "User-agent: *\nDisallow: /private\n"


@pytest.fixture
def upstream():
    return FakeHttp({
        'https://example.com/robots.txt': FakeResponse(200, ROBOTS),
        'https://example.com/page': FakeResponse(200, '<head></head><a href="/next">n</a>', set_cookies=['sid=1']),
        'https://foo.com/robots.txt': FakeResponse(200, ''),
        'https://foo.com': FakeResponse(200, '<p>foo</p>'),
        'https://down.example/robots.txt': FakeResponse(200, ''),
        'https://down.example/': requests.ConnectionError('Name or service not known'),
    })


@pytest.fixture
def client(upstream, identities, clock):
    sessions = SessionStore(identities, clock=clock)
    robots = RobotsGate(http=upstream)
    pipeline = FetchPipeline(sessions, robots, http_factory=lambda: upstream)
    app = create_app(ProxyConfig(), pipeline=pipeline)
    app.testing = True
    return app.test_client()


def fetched(upstream, url):
    return [call for call in upstream.calls if call['url'] == url]


def test_missing_url_is_400(client):
    resp = client.get('/proxy')

    assert resp.status_code == 400
    assert resp.mimetype == 'text/plain'
    assert b'Missing "url"' in resp.data


def test_robots_disallowed_is_403_without_fetch(client, upstream):
    resp = client.get('/proxy?url=https://example.com/private/x&referer=%20')

    assert resp.status_code == 403
    assert b'robots.txt' in resp.data
    assert fetched(upstream, 'https://example.com/private/x') == []


def test_success_returns_rewritten_html(client):
    resp = client.get('/proxy?url=example.com/page&referer=https://www.google.com&profile=mac_chrome')

    assert resp.status_code == 200
    assert resp.mimetype == 'text/html'
    assert b'href="https://example.com/next"' in resp.data
    assert resp.headers['X-Proxy-Session']


def test_space_referer_sends_no_referer(client, upstream):
    resp = client.get('/proxy?url=foo.com&referer=%20')

    assert resp.status_code == 200
    assert 'Referer' not in fetched(upstream, 'https://foo.com')[0]['headers']


def test_session_id_round_trip_reuses_cookies(client, upstream):
    first = client.get('/proxy?url=example.com/page')
    session_id = first.headers['X-Proxy-Session']

    second = client.get(f'/proxy?url=example.com/page&session={session_id}')

    assert second.headers['X-Proxy-Session'] == session_id
    assert fetched(upstream, 'https://example.com/page')[1]['headers']['Cookie'] == 'sid=1'


def test_network_failure_is_500_with_cause(client):
    resp = client.get('/proxy?url=https://down.example/')

    assert resp.status_code == 500
    assert b'Error fetching the requested URL: Name or service not known' in resp.data


def test_cors_headers_on_every_response(client):
    for path in ('/', '/proxy', '/referer-options'):
        assert client.get(path).headers['Access-Control-Allow-Origin'] == '*'


def test_option_endpoints(client):
    referers = client.get('/referer-options').get_json()
    profiles = client.get('/user-agent-options').get_json()

    assert {'value': ' ', 'label': 'NO'} in referers
    assert len(profiles) == 8


def test_home_page_has_form(client):
    resp = client.get('/')

    assert resp.status_code == 200
    assert b'proxyIframe' in resp.data
