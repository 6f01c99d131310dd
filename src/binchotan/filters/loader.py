"""Filter discovery and loading.

A filter repository is a directory with one subdirectory per filter
package. Each package holds a binchotan.toml manifest and the Lua
script it names as entrypoint.

Loading is all or nothing: one broken package fails the whole load.
"""

from dataclasses import dataclass
from pathlib import Path

from binchotan.core.errors import (
    FilterIOError,
    FilterNotFoundError,
    FilterPathNotDirError,
    LoadError,
)
from binchotan.core.logging import debug, error, info
from binchotan.filters.manifest import FilterMeta, read_meta

DEFAULT_FILTER_DIR = Path.home() / ".config" / "binchotan" / "filters"


@dataclass(frozen=True)
class Filter:
    """A loaded filter: the script source and its manifest."""

    src: str
    meta: FilterMeta
    path: Path | None = None

    @property
    def name(self) -> str:
        return self.meta.name


def _package_dirs(root_dir: Path) -> list[Path]:
    """List candidate package directories under root_dir, sorted by name."""
    if not root_dir.is_dir():
        raise FilterPathNotDirError(root_dir)

    try:
        entries = sorted(root_dir.iterdir())
    except OSError as e:
        raise FilterIOError(f"Cannot list {root_dir}: {e}", path=root_dir) from e

    packages = []
    for entry in entries:
        try:
            if entry.is_dir():
                packages.append(entry)
        except OSError:
            continue
    return packages


def load_filter(package_dir: Path) -> Filter:
    """Load a single filter package.

    Args:
        package_dir: Filter package directory

    Returns:
        Loaded Filter

    Raises:
        FilterPathNotDirError: If package_dir is not a directory
        FilterIOError: If the manifest or entrypoint cannot be read
        FilterMetaParseError: If the manifest is invalid
    """
    package_dir = Path(package_dir)
    if not package_dir.is_dir():
        raise FilterPathNotDirError(package_dir)

    meta = read_meta(package_dir)

    entry_point = package_dir / meta.entrypoint
    try:
        src = entry_point.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FilterIOError(
            f"Cannot read entrypoint {meta.entrypoint} of filter '{meta.name}': {e}",
            path=entry_point,
        ) from e

    return Filter(src=src, meta=meta, path=package_dir)


def load_filters(root_dir: Path) -> list[Filter]:
    """Load every filter package under root_dir.

    Args:
        root_dir: Filter repository directory

    Returns:
        Filters in lexical order of their package directory

    Raises:
        LoadError: On the first package that fails to load
    """
    filters = []
    for package_dir in _package_dirs(Path(root_dir)):
        try:
            loaded = load_filter(package_dir)
        except LoadError as e:
            error(
                f"could not load filter in {package_dir}/ : {e}",
                path=str(package_dir),
                code=e.code,
            )
            raise
        debug(f"loaded filter '{loaded.name}' from {package_dir}/")
        filters.append(loaded)
    return filters


def discover_filters(root_dir: Path) -> list[FilterMeta]:
    """Read the manifests under root_dir without loading the scripts.

    Args:
        root_dir: Filter repository directory

    Returns:
        List of filter manifests found

    Raises:
        LoadError: On the first manifest that fails to parse
    """
    manifests = []
    for package_dir in _package_dirs(Path(root_dir)):
        try:
            manifests.append(read_meta(package_dir))
        except LoadError as e:
            error(
                f"could not read filter manifest in {package_dir}/ : {e}",
                path=str(package_dir),
                code=e.code,
            )
            raise
    return manifests


class FilterLoader:
    """Loads and holds the filters of one repository."""

    def __init__(self, root_dir: Path | None = None) -> None:
        """Initialize the filter loader.

        Args:
            root_dir: Filter repository directory
        """
        self._root_dir = Path(root_dir) if root_dir is not None else DEFAULT_FILTER_DIR
        self._filters: list[Filter] | None = None

    @property
    def filters(self) -> list[Filter]:
        """Get the loaded filters, loading if necessary."""
        if self._filters is None:
            self._filters = load_filters(self._root_dir)
        return list(self._filters)

    def load(self) -> list[Filter]:
        """Load the repository if it has not been loaded yet."""
        return self.filters

    def reload(self) -> list[Filter]:
        """Load the repository again from disk.

        The current filters are only replaced when the new load
        succeeds; on failure they stay in place and the error is raised.
        """
        filters = load_filters(self._root_dir)
        self._filters = filters
        info(f"reloaded {len(filters)} filter(s) from {self._root_dir}")
        return list(filters)

    def get(self, name: str) -> Filter:
        """Get a loaded filter by its manifest name.

        Raises:
            FilterNotFoundError: If no filter has that name
        """
        for f in self.filters:
            if f.meta.name == name:
                return f
        raise FilterNotFoundError(name, [f.meta.name for f in self.filters])
