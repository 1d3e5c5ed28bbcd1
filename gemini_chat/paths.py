"""
Where Gemini Chat keeps its files on disk.

Everything the app writes (for now just ``settings.json`` with the API key,
model and saved gems) goes into ``Asset/`` next to ``main.py``. The location
is fixed relative to this package, not to the working directory, so the
window finds the same settings however it was started.
"""

import os

# Parent of gemini_chat/, which is where main.py sits.
_PROJECT_ROOT: str = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

#: Absolute path to the ``Asset/`` folder.
ASSET_DIR: str = os.path.join(_PROJECT_ROOT, "Asset")


def asset_path(filename: str) -> str:
    """Return the absolute path for *filename* inside the Asset folder.

    The folder is created on first use, not at import time.
    """
    os.makedirs(ASSET_DIR, exist_ok=True)
    return os.path.join(ASSET_DIR, filename)
