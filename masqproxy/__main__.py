import logging

from .app import create_app
from .config import ProxyConfig, configure_logging


def main():
    config = ProxyConfig.from_env()
    configure_logging(config.log_level)
    app = create_app(config)
    logging.getLogger(__name__).info(f"Server running at http://localhost:{config.port}")
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == '__main__':
    main()
