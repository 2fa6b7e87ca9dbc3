"""
Builders and fakes shared by the test modules.
"""

import asyncio
from typing import Callable, Iterable

from article_authoring.slug_client import SlugCheckError

FIXED_NOW_MS = 1_700_000_000_000


def text(value: str) -> dict:
    return {"type": "text", "text": value}


def paragraph(value: str) -> dict:
    return {"type": "paragraph", "children": [text(value)]}


def heading(level: int, value: str) -> dict:
    children = [text(value)] if value else []
    return {"type": "heading", "attrs": {"level": level}, "children": children}


def doc(*children) -> dict:
    return {"type": "doc", "children": list(children)}


def words(count: int, word: str = "lorem") -> str:
    return " ".join([word] * count)


class FakeSlugChecker:
    """
    In-memory uniqueness authority.

    Slugs in ``taken`` are reported as used, slugs in ``failing`` raise
    SlugCheckError. hold(slug) makes checks for that slug wait until the
    returned event is set, to control completion order.
    """

    def __init__(self, taken: Iterable[str] = (), failing: Iterable[str] = ()):
        self.taken = set(taken)
        self.failing = set(failing)
        self.calls: list[tuple[str, str]] = []
        self.gates: dict[str, asyncio.Event] = {}

    def hold(self, slug: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[slug] = gate
        return gate

    async def is_unique(self, slug: str, site_id: str) -> bool:
        self.calls.append((slug, site_id))
        gate = self.gates.get(slug)
        if gate is not None:
            await gate.wait()
        if slug in self.failing:
            raise SlugCheckError("backend unavailable")
        return slug not in self.taken


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll the event loop until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not reached before timeout")
        await asyncio.sleep(0.005)
