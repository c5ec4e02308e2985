"""
List Docker images through the daemon's Unix domain socket.

This example demonstrates how to use HTTPClient to talk to a local
daemon API without any TCP networking.
"""

import json
import logging
import sys

from uds_http_core import HTTPClient, HTTPCoreError, Request
from uds_http_core.network import DEFAULT_DOCKER_SOCKET

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def list_images(socket_path: str = DEFAULT_DOCKER_SOCKET) -> None:
    """Fetch /images/json and print one line per image."""
    with HTTPClient.open_unix(socket_path, timeout=10) as client:
        request = Request.get("/images/json").param("all", "false").build()
        response = client.execute(request)
        logger.info(f"Response status: {response.status_code}")

        for image in json.loads(response.text()):
            tags = ", ".join(image.get("RepoTags") or ["<none>"])
            print(f"{image['Id'][:19]}  {tags}")


def ping(socket_path: str = DEFAULT_DOCKER_SOCKET) -> None:
    """Check that the daemon answers on its socket."""
    with HTTPClient.open_unix(socket_path, timeout=10) as client:
        response = client.execute(Request(path="/_ping"))
        logger.info(f"Ping: {response.status_code} {response.text()}")
        logger.info(f"Metrics: {client.metrics}")


def main() -> None:
    """Run the examples."""
    socket_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DOCKER_SOCKET
    try:
        ping(socket_path)
        list_images(socket_path)
    except HTTPCoreError as e:
        logger.error(f"Request failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
