import logging

from masqproxy.config import ProxyConfig


def test_defaults():
    config = ProxyConfig.from_env({})

    assert config.port == 3000
    assert config.fetch_timeout == 10.0
    assert config.max_redirects == 5
    assert config.session_ttl == 3600.0


def test_env_overrides():
    config = ProxyConfig.from_env({'PORT': '8080', 'FETCH_TIMEOUT': '2.5', 'LOG_LEVEL': 'DEBUG'})

    assert config.port == 8080
    assert config.fetch_timeout == 2.5
    assert config.log_level == 'DEBUG'


def test_invalid_value_keeps_default(caplog):
    with caplog.at_level(logging.WARNING, logger='masqproxy.config'):
        config = ProxyConfig.from_env({'PORT': 'eighty'})

    assert config.port == 3000
    assert 'PORT' in caplog.text
