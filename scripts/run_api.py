# Use postponed evaluation of annotations so type hints don't require importing types at runtime.
from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

import os

# We import `uvicorn` to run our FastAPI application as an ASGI server during local development.
import uvicorn

# We use a factory function so the FastAPI app can be created with a typed config (no global state).
from bikeradar.api.app import create_app
from bikeradar.config.loader import load_config


def main() -> None:
    config = load_config()
    app = create_app(config)

    # Env vars win over the config file so a container can rebind without editing JSON.
    host = os.getenv("BIKERADAR_HOST", config.web.host)
    port = int(os.getenv("BIKERADAR_PORT", str(config.web.port)))

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
