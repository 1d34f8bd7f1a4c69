"""
Terminal user interface for ssh-browser.
"""

from ssh_browser.ui.app import RemoteBrowserApp
from ssh_browser.ui.render import RenderStyle, format_size

__all__ = [
    "RemoteBrowserApp",
    "RenderStyle",
    "format_size",
]
