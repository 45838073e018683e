"""Synthetic browser identities.

An identity is a user-agent string plus a header set that looks like it came
from the same browser. One is drawn per session and never changes afterwards.
"""
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8'
ACCEPT_LANGUAGES = ('en-US,en;q=0.9', 'en-GB,en;q=0.8', 'en-CA,en;q=0.7')
PLATFORMS = ('"Windows"', '"macOS"', '"Linux"')
BROWSER_VERSIONS = ('110', '111', '112', '113', '114')
# None means the request carries no Referer at all.
REFERERS = ('https://www.google.com', 'https://www.bing.com', 'https://www.duckduckgo.com', None)
FETCH_SITES = ('same-origin', 'cross-site', 'none')

ANDROID = 'android'
IOS = 'ios'
WINDOWS = 'windows'
MAC = 'mac'
ARCHETYPES = (ANDROID, IOS, WINDOWS, MAC)

_USER_AGENT_TEMPLATES = {
    ANDROID: (
        'Mozilla/5.0 (Linux; Android {android}; {device}) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/{chrome}.0.0.0 Mobile Safari/537.36',
    ),
    IOS: (
        'Mozilla/5.0 (iPhone; CPU iPhone OS {ios} like Mac OS X) AppleWebKit/605.1.15 '
        '(KHTML, like Gecko) Version/{safari} Mobile/15E148 Safari/604.1',
        'Mozilla/5.0 (iPhone; CPU iPhone OS {ios} like Mac OS X) AppleWebKit/605.1.15 '
        '(KHTML, like Gecko) CriOS/{chrome}.0.0.0 Mobile/15E148 Safari/604.1',
    ),
    WINDOWS: (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/{chrome}.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/{chrome}.0.0.0 Safari/537.36 Edg/{chrome}.0.0.0',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:{firefox}.0) Gecko/20100101 Firefox/{firefox}.0',
    ),
    MAC: (
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/{chrome}.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 '
        '(KHTML, like Gecko) Version/{safari} Safari/605.1.15',
    ),
}

_ANDROID_DEVICES = ('SM-S918B', 'Pixel 7', 'Pixel 8 Pro', 'SM-A546B', 'M2101K20G')


@dataclass(frozen=True)
class Identity:
    archetype: str
    user_agent: str
    headers: Mapping[str, str]


def random_user_agent(archetype: str, rng: random.Random) -> str:
    template = rng.choice(_USER_AGENT_TEMPLATES[archetype])
    return template.format(
        android=rng.randint(10, 14),
        device=rng.choice(_ANDROID_DEVICES),
        ios=f"{rng.randint(15, 17)}_{rng.randint(0, 6)}",
        safari=f"{rng.randint(15, 17)}.{rng.randint(0, 6)}",
        chrome=rng.randint(110, 124),
        firefox=rng.randint(110, 124),
    )


def random_headers(user_agent: str, rng: random.Random) -> dict:
    headers = {
        'User-Agent': user_agent,
        'Accept-Language': rng.choice(ACCEPT_LANGUAGES),
        'Accept': ACCEPT,
        'Accept-Encoding': 'gzip, deflate',
        'Sec-Ch-Ua-Platform': rng.choice(PLATFORMS),
        'Sec-Ch-Ua': f'"Not:A-Brand";v="99", "Chromium";v="{rng.choice(BROWSER_VERSIONS)}"',
        'X-Forwarded-For': '.'.join(str(rng.randrange(255)) for _ in range(4)),
        'DNT': '1' if rng.random() > 0.5 else '0',
        'Upgrade-Insecure-Requests': '1',
        'Sec-Fetch-User': '?1',
        'Sec-Fetch-Site': rng.choice(FETCH_SITES),
    }
    referer = rng.choice(REFERERS)
    if referer is not None:
        headers['Referer'] = referer
    return headers


class IdentityGenerator:
    def __init__(self, rng: Optional[random.Random] = None):
        # SystemRandom unless a seeded source is injected
        self.rng = rng or random.SystemRandom()

    def generate(self) -> Identity:
        archetype = self.rng.choice(ARCHETYPES)
        user_agent = random_user_agent(archetype, self.rng)
        headers = MappingProxyType(random_headers(user_agent, self.rng))
        return Identity(archetype, user_agent, headers)
