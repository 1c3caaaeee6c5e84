"""
Derive the identity of a drink image from where it was stored.

Object keys look like `<bar>/<drink>.<ext>`, possibly with more leading folders:
the bar is the folder directly containing the file, the drink is the file name up to the first dot.
"""

from urllib.parse import quote

from drinksync.config import get_settings
from drinksync.errors import MalformedPathError


def parse_object_key(path: str) -> tuple[str, str]:
    """
    Split an object key into (bar_name, drink_name).

    >>> parse_object_key("mojito-bar/margarita.png")
    ('mojito-bar', 'margarita')
    >>> parse_object_key("bars/mojito-bar/margarita.large.png")
    ('mojito-bar', 'margarita')
    """
    parts = path.split("/")
    if len(parts) < 2:
        raise MalformedPathError(path, "expected at least a folder and a file name")
    bar_name, filename = parts[-2], parts[-1]
    if "." not in filename:
        raise MalformedPathError(path, f"file name {filename!r} has no extension")
    drink_name = filename.split(".", 1)[0]
    if not bar_name:
        raise MalformedPathError(path, "bar folder name is empty")
    if not drink_name:
        raise MalformedPathError(path, f"file name {filename!r} has no name before the extension")
    return bar_name, drink_name


def object_url(bucket: str, key: str, template: str | None = None) -> str:
    """
    Fully qualified locator for an object, by default the virtual-hosted S3 URL.
    The key is percent-encoded again, keeping the slashes.
    """
    if template is None:
        template = get_settings().object_url_template
    return template.format(bucket=bucket, key=quote(key, safe="/"))
