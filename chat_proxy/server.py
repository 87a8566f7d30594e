"""Process entrypoint serving the proxy with uvicorn."""

import logging

import uvicorn

from chat_proxy.main import create_app


logger = logging.getLogger(__name__)


def run(host: str = "0.0.0.0") -> None:
    application = create_app()
    port = application.state.settings.port
    logger.info("chat_proxy_listening host=%s port=%s", host, port)
    uvicorn.run(application, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
