# File: site_mirror/writer.py
"""site_mirror.writer: persisting fetched artifacts into category directories."""

from __future__ import annotations

import enum
import posixpath
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import aiofiles

from site_mirror.classifier import Category
from site_mirror.errors import NonBinaryImagePayload, WriteError
from site_mirror.logger import logger

__all__: Sequence[str] = ("CollisionPolicy", "ArtifactWriter", "CATEGORY_DIRS")

#: subdirectory of the output root per persistable category ("" is the root)
CATEGORY_DIRS: Dict[Category, str] = {
    Category.HTML: "",
    Category.SCRIPT: "js",
    Category.STYLESHEET: "css",
    Category.IMAGE: "img",
}

_BINARY = (bytes, bytearray, memoryview)


class CollisionPolicy(str, enum.Enum):
    """What happens when two URLs derive the same file name."""

    OVERWRITE = "overwrite"
    SUFFIX = "suffix"


class ArtifactWriter:
    """Writes artifacts under ``output_root`` using one directory per category."""

    def __init__(
        self,
        output_root: Union[str, Path],
        collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
    ) -> None:
        self.root = Path(output_root)
        self.collision = CollisionPolicy(collision)
        self._owners: Dict[Path, str] = {}

    def directory(self, category: Category) -> Path:
        try:
            sub = CATEGORY_DIRS[category]
        except KeyError:
            raise ValueError(f"category {category.value!r} is not persisted") from None
        return self.root / sub if sub else self.root

    def prepare(self) -> None:
        """Create every category directory; existing ones are left alone."""
        for category in CATEGORY_DIRS:
            path = self.directory(category)
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise WriteError(str(path), f"cannot create directory: {exc}") from exc

    def target(self, category: Category, file_name: str, url: Optional[str] = None) -> Path:
        """Pick the path for *file_name*, reserving it for *url* under ``SUFFIX``.

        Runs without awaiting, so two workers can never reserve the same path.
        """
        directory = self.directory(category)
        path = directory / file_name
        if self.collision is CollisionPolicy.OVERWRITE or url is None:
            return path

        stem, ext = posixpath.splitext(file_name)
        counter = 0
        while True:
            owner = self._owners.get(path)
            if owner is None or owner == url:
                self._owners[path] = url
                return path
            counter += 1
            path = directory / f"{stem}-{counter}{ext}"

    async def persist(
        self,
        category: Category,
        file_name: str,
        payload: Union[bytes, bytearray, memoryview, str],
        url: Optional[str] = None,
    ) -> Path:
        """Write *payload* and return the path written.

        Image payloads must be raw bytes; text payloads of other categories
        are encoded as UTF-8.
        """
        if category is Category.IMAGE and not isinstance(payload, _BINARY):
            raise NonBinaryImagePayload(url or file_name, type(payload).__name__)

        data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        path = self.target(category, file_name, url)
        try:
            async with aiofiles.open(path, mode="wb") as fh:
                await fh.write(data)
        except OSError as exc:
            raise WriteError(str(path), exc.strerror or str(exc)) from exc

        logger.info("Saved %s: %s", category.value, path)
        return path
