"""Command-line entry point for the Jetson chat relay.

Integrated mode (default) serves the relay API and the NiceGUI chat page
from one uvicorn server on PORT. Separate mode starts the relay on PORT and
the chat page as its own NiceGUI process on UI_PORT, pointed at the relay
through API_BASE_URL.

Server settings come from the environment and an optional .env file; the
upstream URL and model are fixed defaults of RelayConfig.
"""

import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def relay_port() -> int:
    return int(os.getenv("PORT", "8000"))


def separate_commands() -> tuple[list[str], list[str], dict[str, str]]:
    """Build the relay and chat page commands for separate mode.

    Returns:
        The relay server argv, the chat page argv, and the chat page's
        environment with API_BASE_URL pointing at the relay.
    """
    port = relay_port()
    relay_cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "jetson_relay.api.app:app",
        "--host",
        os.getenv("HOST", "0.0.0.0"),
        "--port",
        str(port),
        "--log-level",
        os.getenv("LOG_LEVEL", "info").lower(),
    ]
    ui_cmd = [sys.executable, "-m", "jetson_relay.ui.chat_page"]
    ui_env = {
        **os.environ,
        "API_BASE_URL": os.getenv("API_BASE_URL", f"http://localhost:{port}"),
    }
    return relay_cmd, ui_cmd, ui_env


def run_integrated() -> None:
    """Serve the relay routes and the chat page from one server on PORT."""
    import uvicorn
    from nicegui import ui

    from jetson_relay.api.app import create_app
    from jetson_relay.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    port = relay_port()
    app = create_app()
    ui.run_with(
        app,
        title="Jetson Chat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "jetson-relay-secret"),
    )

    logger.info(f"Relay API on http://localhost:{port}/api/chat")
    logger.info(f"Chat UI on http://localhost:{port}/")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the relay and the chat page as two processes until either exits."""
    relay_cmd, ui_cmd, ui_env = separate_commands()
    logger.info(f"Relay API on http://localhost:{relay_port()}/api/chat")
    logger.info(
        f"Chat UI on http://localhost:{os.getenv('UI_PORT', '8080')}/ "
        f"using {ui_env['API_BASE_URL']}"
    )

    relay_proc = subprocess.Popen(relay_cmd)
    ui_proc = subprocess.Popen(ui_cmd, env=ui_env)
    procs = [relay_proc, ui_proc]
    try:
        while all(p.poll() is None for p in procs):
            try:
                relay_proc.wait(timeout=1)
            except subprocess.TimeoutExpired:
                continue
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()


def main() -> None:
    """Start the relay. Set RUN_MODE=separate to serve the chat page on UI_PORT."""
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting Jetson Chat Relay in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
