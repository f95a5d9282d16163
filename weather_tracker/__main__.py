"""
Run the Weather Tracker API server.

Usage:
    python -m weather_tracker
    python -m weather_tracker --reload  # Development mode
"""

import argparse

import uvicorn

from weather_tracker.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run Weather Tracker API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args()

    settings = get_settings()

    uvicorn.run(
        "weather_tracker.main:create_app",
        factory=True,
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload or settings.DEBUG,
        log_config=None,  # logging is configured by create_app
    )


if __name__ == "__main__":
    main()
