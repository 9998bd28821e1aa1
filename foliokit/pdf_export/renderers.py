"""Local rendering for exports the backend hands back as markup."""

from __future__ import annotations

import tempfile
import webbrowser
from pathlib import Path
from typing import Callable, Protocol

from ..core.exceptions import ExportError
from ..core.utils import get_logger

LOGGER = get_logger("foliokit.pdf_export.renderers")

PRINT_SCRIPT = "<script>window.addEventListener('load', function () { window.print(); });</script>"


class ClientRenderer(Protocol):
    """Render export markup locally and return where it was written."""

    def __call__(self, html: str, filename: str) -> Path | None:
        ...


def with_print_trigger(html: str) -> str:
    marker = html.lower().rfind("</body>")
    if marker == -1:
        return html + PRINT_SCRIPT
    return html[:marker] + PRINT_SCRIPT + html[marker:]


class BrowserPrintRenderer:
    """Write the markup to disk and open it in the system browser.

    The page prints itself once loaded, leaving "Save as PDF" to the user.
    """

    def __init__(
        self,
        output_dir: str | Path | None = None,
        opener: Callable[[str], bool] = webbrowser.open,
    ) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.opener = opener

    def __call__(self, html: str, filename: str) -> Path:
        directory = self.output_dir or Path(tempfile.mkdtemp(prefix="foliokit-"))
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / (Path(filename).stem + ".html")
        target.write_text(with_print_trigger(html), encoding="utf-8")
        LOGGER.info("Opening %s for printing", target)
        if not self.opener(target.resolve().as_uri()):
            raise ExportError(f"Could not open a browser to print {target}")
        return target


__all__ = ["BrowserPrintRenderer", "ClientRenderer", "PRINT_SCRIPT", "with_print_trigger"]
