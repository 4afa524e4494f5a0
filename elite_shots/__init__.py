"""Elite Screenshots — converts Elite Dangerous screenshots as they are taken.

Watches the game's screenshot folder for new BMP captures, converts them
to PNG, names them from a configurable token template and moves them to
an output folder.
"""

__version__ = "0.1.0"
__app_name__ = "Elite Screenshots"
