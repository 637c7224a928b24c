"""External web navigation — hand a company's webpage to the host browser.

The string is passed through verbatim: no parsing, no scheme validation.
Whatever the host opener does with an invalid URL is its business.
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable

logger = logging.getLogger(__name__)

UrlOpener = Callable[[str], bool]


def open_external_link(url: str, *, opener: UrlOpener | None = None) -> bool:
    """Open *url* with the host's default URL handler.

    Returns whatever the opener reports (``webbrowser.open`` returns
    ``False`` when no browser could be launched).
    """
    logger.info("Opening external link %r.", url)
    return (opener or webbrowser.open)(url)
