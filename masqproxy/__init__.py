from .app import create_app
from .config import ProxyConfig
from .identity import Identity, IdentityGenerator
from .pipeline import FetchPipeline
from .rewrite import rewrite
from .robots import RobotsDecision, RobotsGate
from .sessions import Session, SessionStore

__all__ = [
    'create_app', 'ProxyConfig', 'Identity', 'IdentityGenerator', 'FetchPipeline',
    'rewrite', 'RobotsDecision', 'RobotsGate', 'Session', 'SessionStore',
]
