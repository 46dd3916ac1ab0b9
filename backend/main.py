import socket

import uvicorn

from flashdeck import app
from flashdeck.config import settings


def resolve_port(host: str, port: int) -> int:
    """Return ``port``, or a free port on ``host`` when it is 0."""
    if port:
        return port
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


if __name__ == "__main__":
    port = resolve_port(settings.host, settings.port)
    print(f"FLASHDECK_URL=http://{settings.host}:{port}", flush=True)
    uvicorn.run(app, host=settings.host, port=port, log_level=settings.log_level)
