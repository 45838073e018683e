"""robots.txt gate with a per-origin cache that lives as long as the process."""
import enum
import logging
import threading
import time
from dataclasses import dataclass
from urllib.parse import urlparse

import requests
from protego import Protego

from .config import ROBOTS_USER_AGENT
from .transport import get_within

logger = logging.getLogger(__name__)

LOCK_STRIPES = 64


class RobotsDecision(enum.Enum):
    ALLOWED = 'allowed'
    # robots.txt could not be fetched or parsed
    ALLOWED_BY_DEFAULT = 'allowed-by-default'
    DENIED = 'denied'


@dataclass(frozen=True)
class RobotsPolicy:
    origin: str
    rules: Protego
    fetched_at: float

    def allows(self, url, user_agent):
        return self.rules.can_fetch(url, agent_token(user_agent))


def agent_token(user_agent):
    """Product token robots.txt groups are matched against, e.g. "MyBot" for
    "Mozilla/5.0 (compatible; MyBot/1.0)"."""
    if 'compatible;' in user_agent:
        user_agent = user_agent.split('compatible;', 1)[1]
    return user_agent.strip().split('/', 1)[0].strip(' ()')


def origin_of(url):
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"No origin in {url!r}")
    host = parsed.netloc.rsplit('@', 1)[-1]
    return f"{parsed.scheme.lower()}://{host.lower()}"


class RobotsGate:
    def __init__(self, http=None, user_agent=ROBOTS_USER_AGENT, timeout=10.0, clock=time.time,
                 timer=time.monotonic):
        self.http = http or requests.Session()
        self.user_agent = user_agent
        self.timeout = timeout
        self.clock = clock
        self.timer = timer
        self._policies = {}
        # striped so the lock table stays fixed however many origins are seen
        self._origin_locks = [threading.Lock() for _ in range(LOCK_STRIPES)]
        self._lock = threading.Lock()

    def cached(self, origin):
        with self._lock:
            return self._policies.get(origin)

    def is_allowed(self, target_url) -> bool:
        return self.check(target_url) is not RobotsDecision.DENIED

    def check(self, target_url) -> RobotsDecision:
        try:
            origin = origin_of(target_url)
        except ValueError as e:
            logger.warning(f"robots.txt check skipped, allowing by default: {e}")
            return RobotsDecision.ALLOWED_BY_DEFAULT

        # one fetch per origin even when several requests arrive together
        with self._origin_lock(origin):
            policy = self.cached(origin)
            if policy is not None:
                logger.debug(f"Using cached robots.txt for {origin}")
            else:
                policy = self._fetch(origin)
                if policy is None:
                    return RobotsDecision.ALLOWED_BY_DEFAULT
                with self._lock:
                    self._policies[origin] = policy

        if policy.allows(target_url, self.user_agent):
            return RobotsDecision.ALLOWED
        logger.warning(f"robots.txt for {origin} disallows {target_url}")
        return RobotsDecision.DENIED

    def _origin_lock(self, origin):
        return self._origin_locks[hash(origin) % LOCK_STRIPES]

    def _fetch(self, origin):
        robots_url = f"{origin}/robots.txt"
        try:
            resp, body = get_within(
                self.http, robots_url, self.timeout, self.timer, headers={'User-Agent': self.user_agent},
            )
            resp.raise_for_status()
            rules = Protego.parse(body.decode(resp.encoding or 'utf-8', errors='replace'))
        except (requests.RequestException, LookupError) as e:
            logger.warning(f"Error fetching or parsing robots.txt from {robots_url}, allowing by default: {e}")
            return None
        logger.info(f"Fetched and cached robots.txt for {origin}")
        return RobotsPolicy(origin, rules, self.clock())
