"""
Launches the Gemini Chat window.

Logging is configured here, before any ``gemini_chat`` module is imported,
so the ``[API]``/``[APP]``/``[CFG]``/``[GEM]`` records reach the console.
Start it from a checkout with ``python main.py`` or, once installed, with
the ``gemini-chat`` command.
"""

import logging
import sys

# Require Python 3.10+ for the union-type hints used throughout the package.
if sys.version_info < (3, 10):
    sys.exit(
        "Python 3.10 or later is required.\n"
        f"You are running Python {sys.version_info.major}.{sys.version_info.minor}."
    )

# ---------------------------------------------------------------------------
# DEBUG shows each request summary and every persona or toggle change.
# Raise to logging.WARNING for a quiet console.
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s  %(message)s",
    datefmt="%H:%M:%S",
)

from gemini_chat.app import GeminiChatApp  # noqa: E402


def main() -> None:
    app = GeminiChatApp()
    app.run()


if __name__ == "__main__":
    main()
