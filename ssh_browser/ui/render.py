"""
Presentation helpers for remote listings.
"""

from dataclasses import dataclass

from rich.text import Text

from ssh_browser.models.remote import RemoteEntry

_SIZE_SUFFIXES = ("K", "M", "G", "T", "P", "E", "Z", "Y")
_THOUSAND = 1000
_TEN = 10
# Keeps "%.1f" from rounding 9.96 up to "10.0"
_ROUNDING_BIAS = 0.0499

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True, kw_only=True)
class RenderStyle:
    """
    Colours and spacing used by the terminal UI.

    Attributes:
        directory_color: Name colour for directories and the parent marker.
        file_color: Name colour for regular files.
        status_color: Colour of the transient status line.
        margin: Vertical and horizontal outer margin in cells.
    """

    directory_color: str = "#64CDEF"
    file_color: str = "#ffffff"
    status_color: str = "#04B575"
    margin: tuple[int, int] = (1, 2)


DEFAULT_STYLE = RenderStyle()


def format_size(size: int) -> str:
    """
    Human readable decimal size: "999B", "1.5K", "12K", "3.0M".

    Values below ten of a unit keep one decimal, larger ones are truncated.
    """
    if size < _THOUSAND:
        return f"{size}B"

    current = size / _THOUSAND
    for suffix in _SIZE_SUFFIXES:
        if current < _TEN:
            return f"{current - _ROUNDING_BIAS:.1f}{suffix}"
        if current < _THOUSAND:
            return f"{int(current)}{suffix}"
        current /= _THOUSAND
    return f"{int(current * _THOUSAND)}{_SIZE_SUFFIXES[-1]}"


def icon_for(entry: RemoteEntry) -> str:
    if entry.is_parent:
        return "⬆"
    if entry.is_directory:
        return "📁"
    if entry.permissions.startswith("l"):
        return "🔗"
    return "📄"


def format_entry(entry: RemoteEntry, style: RenderStyle = DEFAULT_STYLE) -> Text:
    """Icon plus coloured name, as shown in the item list."""
    color = style.directory_color if entry.is_directory else style.file_color
    text = Text(f"{icon_for(entry)} ")
    text.append(entry.name, style=color)
    return text


def describe_entry(entry: RemoteEntry) -> str:
    """Secondary line: modification time, permissions and size. Empty for the parent marker."""
    if entry.is_parent:
        return ""
    parts = []
    if entry.mod_time is not None:
        parts.append(entry.mod_time.strftime(_TIME_FORMAT))
    if entry.permissions:
        parts.append(entry.permissions)
    parts.append(format_size(entry.size))
    return " ".join(parts)
