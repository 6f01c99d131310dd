"""Running filters against posts.

Every run gets a brand-new script context: the post is bound to the
global ``post``, the filter source is evaluated, and the result decides
what happens to the post. ``nil`` (or ``null``) drops it; a table shaped
like a post replaces it.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, TypeAlias

from pydantic import ValidationError

from binchotan.core.errors import MarshalError, RunError, ScriptError
from binchotan.core.logging import debug
from binchotan.filters.engine import LuaEngine, ScriptEngine
from binchotan.filters.loader import Filter
from binchotan.models.tweet import Tweet

POST_GLOBAL = "post"


@dataclass(frozen=True)
class Keep:
    """The filter let the post through, possibly modified."""

    post: Tweet


@dataclass(frozen=True)
class Drop:
    """The filter suppressed the post."""


FilterOutcome: TypeAlias = Keep | Drop


@dataclass
class FilterRunResult:
    """Result of one post in a batch run."""

    success: bool
    outcome: FilterOutcome | None = None
    error: RunError | None = None
    execution_time_ms: int = 0


def run_filter(
    filter: Filter,
    post: Tweet,
    engine: ScriptEngine | None = None,
) -> FilterOutcome:
    """Run a filter against a single post.

    Args:
        filter: Loaded filter
        post: Post to filter, left untouched
        engine: Script engine (Lua by default)

    Returns:
        Keep with the resulting post, or Drop

    Raises:
        ScriptError: If the script fails to compile or raises
        MarshalError: If the post or the script result cannot cross
            the script boundary
    """
    engine = engine or LuaEngine()
    name = filter.meta.name

    try:
        with engine.create_context() as context:
            bound = post.model_dump(mode="json")
            context.bind(POST_GLOBAL, bound)
            value = context.eval(filter.src)
    except ScriptError as e:
        debug(f"filter '{name}' failed: {e}", filter=name)
        raise ScriptError(str(e), filter_name=name) from e
    except MarshalError as e:
        debug(f"filter '{name}' returned an unusable value: {e}", filter=name)
        raise MarshalError(str(e), filter_name=name) from e

    if value is None:
        return Drop()

    if not isinstance(value, dict):
        raise MarshalError(
            f"filter '{name}' returned {type(value).__name__}, expected a post or nil",
            filter_name=name,
        )

    try:
        return Keep(Tweet.model_validate(_restore_lists(value, bound)))
    except ValidationError as e:
        raise MarshalError(
            f"filter '{name}' returned a table that is not a post: {e}",
            filter_name=name,
        ) from e


class FilterRunner:
    """Runs loaded filters on posts."""

    def __init__(self, engine: ScriptEngine | None = None) -> None:
        """Initialize the filter runner.

        Args:
            engine: Script engine shared by all runs (Lua by default)
        """
        self._engine = engine or LuaEngine()

    @property
    def engine(self) -> ScriptEngine:
        return self._engine

    def run(self, filter: Filter, post: Tweet) -> FilterOutcome:
        """Run a filter against one post. See run_filter."""
        return run_filter(filter, post, engine=self._engine)

    def _run_one(self, filter: Filter, post: Tweet) -> FilterRunResult:
        start_time = time.perf_counter()
        try:
            outcome = self.run(filter, post)
        except RunError as e:
            return FilterRunResult(
                success=False,
                error=e,
                execution_time_ms=_elapsed_ms(start_time),
            )
        return FilterRunResult(
            success=True,
            outcome=outcome,
            execution_time_ms=_elapsed_ms(start_time),
        )

    def run_batch(
        self,
        filter: Filter,
        posts: list[Tweet],
        max_workers: int = 4,
    ) -> list[FilterRunResult]:
        """Run a filter on many posts in parallel.

        Each post gets its own script context; a failing post does not
        affect the others.

        Args:
            filter: Loaded filter
            posts: Posts to filter
            max_workers: Maximum parallel workers

        Returns:
            One FilterRunResult per post, in input order
        """
        if max_workers <= 1 or len(posts) <= 1:
            return [self._run_one(filter, post) for post in posts]

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(lambda post: self._run_one(filter, post), posts))


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


def _restore_lists(value: Any, template: Any) -> Any:
    """Turn empty tables back into lists where the input post had a list.

    Lua has one empty table for both ``[]`` and ``{}``.
    """
    if isinstance(template, list):
        if value == {}:
            return []
        if isinstance(value, list):
            restored = [_restore_lists(v, t) for v, t in zip(value, template)]
            return restored + value[len(template):]
        return value
    if isinstance(template, dict) and isinstance(value, dict):
        return {
            key: _restore_lists(item, template[key]) if key in template else item
            for key, item in value.items()
        }
    return value
