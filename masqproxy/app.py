from flask import Flask, Response, jsonify, render_template_string, request

from .config import ProxyConfig
from .errors import ProxyError
from .identity import IdentityGenerator
from .pipeline import FetchPipeline
from .robots import RobotsGate
from .sessions import SessionStore

USER_AGENT_OPTIONS = [
    {'value': 'android_opera', 'label': 'Android Opera'},
    {'value': 'android_chrome', 'label': 'Android Chrome'},
    {'value': 'iphone_safari', 'label': 'iPhone Safari'},
    {'value': 'iphone_chrome', 'label': 'iPhone Chrome'},
    {'value': 'desktop_chrome', 'label': 'Desktop Chrome'},
    {'value': 'desktop_firefox', 'label': 'Desktop Firefox'},
    {'value': 'desktop_edge', 'label': 'Desktop Edge'},
    {'value': 'mac_chrome', 'label': 'Mac Chrome'},
]

REFERER_OPTIONS = [
    {'value': 'https://www.google.com', 'label': 'Google'},
    {'value': 'https://www.bing.com', 'label': 'Bing'},
    {'value': 'https://www.yahoo.com', 'label': 'Yahoo'},
    {'value': 'https://www.duckduckgo.com', 'label': 'DuckDuckGo'},
    {'value': ' ', 'label': 'NO'},
]

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Origin, X-Requested-With, Content-Type, Accept, Authorization',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
}

HOME_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Basic Proxy</title>
    <style>
        body { font-family: sans-serif; margin: 0; background: #212529; color: white; }
        form { display: flex; gap: 8px; padding: 10px; }
        input, select, button { padding: 10px; border-radius: 20px; border: 1px solid white; background: #ffffff24; color: white; }
        input { flex-grow: 1; }
        button { background: white; color: black; cursor: pointer; }
        #proxyIframe { width: 100%; height: calc(100vh - 62px); border: none; background: white; }
    </style>
</head>
<body>
    <form id="proxyForm">
        <input type="text" id="url" name="url" placeholder="Enter URL" required>
        <select id="userAgent"></select>
        <select id="referer"></select>
        <button type="submit">Search</button>
    </form>
    <iframe id="proxyIframe" src=""></iframe>
    <script>
        async function fillSelect(endpoint, id) {
            const options = await (await fetch(endpoint)).json();
            const select = document.getElementById(id);
            options.forEach(option => select.add(new Option(option.label, option.value)));
        }

        document.addEventListener('DOMContentLoaded', () => {
            fillSelect('/user-agent-options', 'userAgent');
            fillSelect('/referer-options', 'referer');
            document.getElementById('proxyForm').addEventListener('submit', event => {
                event.preventDefault();
                const params = new URLSearchParams({
                    url: document.getElementById('url').value,
                    profile: document.getElementById('userAgent').value,
                    referer: document.getElementById('referer').value,
                });
                document.getElementById('proxyIframe').src = '/proxy?' + params.toString();
            });
        });
    </script>
</body>
</html>
"""


def create_app(config=None, sessions=None, robots=None, pipeline=None):
    if config is None:
        config = ProxyConfig.from_env()
    app = Flask(__name__)
    app.config['PROXY'] = config

    if pipeline is None:
        if sessions is None:
            sessions = SessionStore(IdentityGenerator(), ttl=config.session_ttl)
        if robots is None:
            robots = RobotsGate(user_agent=config.robots_user_agent, timeout=config.robots_timeout)
        pipeline = FetchPipeline(
            sessions, robots, timeout=config.fetch_timeout, max_redirects=config.max_redirects,
        )
    app.extensions['masqproxy'] = pipeline

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        return response

    @app.errorhandler(ProxyError)
    def proxy_error(error):
        return Response(error.message, status=error.status_code, content_type='text/plain; charset=utf-8')

    @app.route('/')
    def home():
        return render_template_string(HOME_HTML)

    @app.route('/user-agent-options')
    def user_agent_options():
        return jsonify(USER_AGENT_OPTIONS)

    @app.route('/referer-options')
    def referer_options():
        return jsonify(REFERER_OPTIONS)

    @app.route('/proxy')
    def proxy():
        # "profile" is only a front end hint, the session identity decides the headers
        result = pipeline.proxy(
            request.args.get('url'),
            referer=request.args.get('referer'),
            session_id=request.args.get('session'),
        )
        response = Response(result.html, content_type='text/html; charset=utf-8')
        response.headers['X-Proxy-Session'] = result.session_id
        return response

    return app
