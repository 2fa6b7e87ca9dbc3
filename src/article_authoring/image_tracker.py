"""
Session-scoped tracking of images uploaded into the article body.

The tracker is created once per authoring session and handed to the
components that need it (draft manager for clearing, submission for the
image manifest).
"""

from typing import Iterable

from .models import ContentImages, normalize_content_images


class UploadedImageTracker:
    """Ordered, de-duplicated list of uploaded content-image URLs."""

    def __init__(self, urls: Iterable[str] = ()):
        self._urls: list[str] = []
        self.extend(urls)

    def add(self, url: str) -> None:
        """Record an uploaded image URL (ignored if blank or already tracked)."""
        if url and url not in self._urls:
            self._urls.append(url)

    def extend(self, urls: Iterable[str]) -> None:
        for url in urls:
            self.add(url)

    def restore(self, images: ContentImages) -> int:
        """
        Seed the tracker with an existing article's images.

        Args:
            images: JSON text, list, or tagged RawImages/ParsedImages.

        Returns:
            Number of URLs now tracked.
        """
        self.extend(normalize_content_images(images))
        return len(self._urls)

    @property
    def urls(self) -> list[str]:
        """Copy of the tracked URLs."""
        return list(self._urls)

    def clear(self) -> None:
        self._urls.clear()

    def __len__(self) -> int:
        return len(self._urls)

    def __contains__(self, url: object) -> bool:
        return url in self._urls
