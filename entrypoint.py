"""Backend entrypoint. Starts uvicorn with host and port from the environment."""
import os
import uvicorn

# Import the app object directly so frozen bundles do not rely on uvicorn's
# string-based import.
from shopdesk.main import app


def main() -> None:
    host = os.environ.get("SHOPDESK_HOST", "127.0.0.1")
    port = int(os.environ.get("SHOPDESK_PORT", "8001"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
