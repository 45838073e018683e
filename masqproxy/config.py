import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

# Identity the robots.txt check announces itself as. Never one of the session identities.
ROBOTS_USER_AGENT = 'Mozilla/5.0 (compatible; MyBot/1.0)'


@dataclass(frozen=True)
class ProxyConfig:
    port: int = 3000
    host: str = '0.0.0.0'
    fetch_timeout: float = 10.0
    max_redirects: int = 5
    session_ttl: float = 3600.0
    robots_user_agent: str = ROBOTS_USER_AGENT
    robots_timeout: float = 10.0
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ=None):
        """Build a config from environment variables (PORT, FETCH_TIMEOUT, ...).

        A value that cannot be coerced keeps the default and logs a warning.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for field in fields(cls):
            raw = environ.get(field.name.upper())
            if raw is None or raw == '':
                continue
            try:
                values[field.name] = field.type(raw) if field.type is not str else raw
            except ValueError:
                logger.warning(f"Ignoring invalid {field.name.upper()}={raw!r}, using {field.default!r}")
        return cls(**values)


def configure_logging(level='INFO'):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
