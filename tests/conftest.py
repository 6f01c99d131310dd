"""Shared test fixtures for binchotan filters.

Filter repositories are built under ``tmp_path`` with ``make_filter``;
keep test-specific scripts close to the tests that use them.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from binchotan.core.logging import configure_logging, set_verbose
from binchotan.models.tweet import Tweet

MakeFilter = Callable[..., Path]


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Logging settings are module globals; start every test from defaults."""
    configure_logging(log_format="text", quiet=False)
    set_verbose(False)


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    """Return an empty filter repository directory."""
    root = tmp_path / "filters"
    root.mkdir()
    return root


@pytest.fixture()
def make_filter(repo: Path) -> MakeFilter:
    """Return a factory writing a filter package into the repository."""

    def _make(
        name: str,
        script: str | None = "return post",
        entrypoint: str = "main.lua",
        meta: str | None = None,
    ) -> Path:
        package = repo / name
        package.mkdir()
        if meta is None:
            meta = (
                f'name = "{name}"\n'
                f'description = "{name} filter"\n'
                'author = "t"\n'
                f'entrypoint = "{entrypoint}"\n'
            )
        (package / "binchotan.toml").write_text(meta, encoding="utf-8")
        if script is not None:
            (package / entrypoint).write_text(script, encoding="utf-8")
        return package

    return _make


@pytest.fixture()
def post_data() -> dict[str, Any]:
    return {
        "id": 1001,
        "id_str": "1001",
        "created_at": "Wed Oct 10 20:19:24 +0000 2018",
        "full_text": "hello #binchotan",
        "user": {
            "id": 42,
            "id_str": "42",
            "name": "Alice",
            "screen_name": "alice",
        },
        "entities": {
            "hashtags": [{"text": "binchotan", "indices": [6, 16]}],
            "urls": [],
        },
        "retweet_count": 3,
        "lang": "en",
    }


@pytest.fixture()
def post(post_data: dict[str, Any]) -> Tweet:
    return Tweet.model_validate(post_data)


@pytest.fixture()
def other_post(post_data: dict[str, Any]) -> Tweet:
    data = dict(post_data)
    data.update(
        id=2002,
        id_str="2002",
        full_text="buy now!!!",
        user={"id": 7, "screen_name": "spam"},
    )
    return Tweet.model_validate(data)
