import os
import signal
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env before reading PORT/HOST/ENVIRONMENT
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


if __name__ == "__main__":
    """
    Entry point for the sales daily report server.
    """
    root_dir = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, root_dir)

    PORT = int(os.getenv("PORT", "8000"))
    HOST = os.getenv("HOST", "127.0.0.1")
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
    RELOAD = ENVIRONMENT == "development"

    print(f"Starting Sales Daily Report from {root_dir}...")
    print(f"Environment: {ENVIRONMENT}")
    print(f"Access the app at http://{HOST}:{PORT}")
    print("Press CTRL+C to stop the server")

    def signal_handler(sig, frame):
        print("\n\nShutdown signal received. Stopping server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, signal_handler)

    try:
        # Single worker: login rate limits live in process memory
        uvicorn.run(
            "dailyreport_web.app:create_app",
            factory=True,
            host=HOST,
            port=PORT,
            reload=RELOAD,
            log_level="info" if ENVIRONMENT == "production" else "debug",
        )
    except KeyboardInterrupt:
        print("\n\nShutdown complete.")
