"""Saving retrieved content of internal resources to a local directory.

Example usage:

    # CLI
    linkcrawl https://docs.example.com/ --output ./mirror

    # Python
    from linkcrawl.capture import ContentWriter
    writer = ContentWriter("./mirror", base="https://docs.example.com/")
    await writer.write_text("https://docs.example.com/guide/", "<html>...</html>")
    # -> ./mirror/guide/index.html
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

from .config import DEFAULT_INDEX_NAME
from .identity import canonicalize

LOGGER = logging.getLogger(__name__)


class ContentWriter:
    """Maps internal URLs onto files below an output directory and writes them."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        base: str,
        index_name: str = DEFAULT_INDEX_NAME,
    ):
        self.output_dir = Path(output_dir).expanduser().resolve()
        self.base = base
        self.index_name = index_name
        self.saved = 0

    def path_for(self, url: str) -> Optional[Path]:
        """Return the target file for *url*, or None when it is not saved.

        URLs outside the base, and tails that would escape the output
        directory (``..`` segments), are not saved.
        """
        key = canonicalize(url)
        if not key.startswith(self.base):
            return None

        tail = unquote(urlsplit(key[len(self.base):]).path).lstrip("/")
        path = self.output_dir / tail if tail else self.output_dir
        if not tail or key.endswith("/"):
            path = path / self.index_name

        path = path.resolve()
        try:
            path.relative_to(self.output_dir)
        except ValueError:
            LOGGER.warning("Not saving %s: outside of %s", url, self.output_dir)
            return None
        return path

    async def write_text(self, url: str, content: str) -> None:
        """Save *content* for *url* (no-op for URLs that are not saved)."""
        path = self.path_for(url)
        if path is None:
            return

        LOGGER.info("Saving %s to %s", url, path)
        await asyncio.to_thread(_write_file, path, content)
        self.saved += 1


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
