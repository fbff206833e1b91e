"""FinAIBot entry point.

RUN_MODE selects what this process serves:

    all   relay API and chat page on one server (default)
    api   relay API only, for a chat page or client running elsewhere
    ui    chat page only, streaming from the relay at API_BASE_URL

Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

RUN_MODES = ("all", "api", "ui")


def _serve_relay(with_ui: bool) -> None:
    import uvicorn

    from finaibot.api.app import create_app

    relay_app = create_app()
    if with_ui:
        from nicegui import ui

        from finaibot.ui.chat_page import chat_page  # noqa: F401 - registers "/"

        ui.run_with(
            relay_app,
            title="FinAIBot",
            favicon="💰",
            storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "finaibot-secret"),
        )

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Relay listening on {host}:{port} (chat page {'on' if with_ui else 'off'})")
    uvicorn.run(relay_app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def main() -> None:
    mode = os.getenv("RUN_MODE", "all").lower()
    if mode not in RUN_MODES:
        logger.error(f"Unknown RUN_MODE {mode!r}; expected one of {', '.join(RUN_MODES)}")
        sys.exit(2)

    if mode == "ui":
        from finaibot.ui.chat_page import main as run_chat_page

        run_chat_page()
        return

    _serve_relay(with_ui=mode == "all")


if __name__ == "__main__":
    main()
