"""Workspace file tree with an on-demand content cache."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

SKIPPED_DIRS = {"node_modules", "__pycache__"}


@dataclass(frozen=True)
class CachedFile:
    path: str
    content: str
    size: int


class WorkspaceFiles:
    """Files known from the tree listing, fetched into the cache when asked.

    ``get_active_file_content`` only reads the cache, so context gathering in
    the graph never touches the disk; callers warm the cache with ``load``.
    """

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()
        self._tree: list[str] | None = None
        self._cache: dict[str, CachedFile] = {}

    @property
    def root(self) -> Path:
        return self._root

    def tree(self) -> list[str]:
        """Relative posix paths of every file in the workspace (computed once)."""
        if self._tree is None:
            self._tree = sorted(self._walk())
            logger.info("workspace.tree files={} root={}", len(self._tree), self._root)
        return list(self._tree)

    def load(self, path: str) -> CachedFile | None:
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        if path not in self.tree():
            logger.warning("workspace.unknown_file path={}", path)
            return None
        try:
            content = (self._root / path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("workspace.read_failed path={} error={}", path, exc)
            return None
        cached = CachedFile(path=path, content=content, size=len(content))
        self._cache[path] = cached
        logger.debug("workspace.loaded path={} size={}", path, cached.size)
        return cached

    def is_cached(self, path: str) -> bool:
        return path in self._cache

    def get_active_file_content(self, path: str) -> str | None:
        cached = self._cache.get(path)
        return cached.content if cached else None

    def _walk(self) -> list[str]:
        found: list[str] = []
        for item in self._root.rglob("*"):
            relative = item.relative_to(self._root)
            if any(part.startswith(".") or part in SKIPPED_DIRS for part in relative.parts):
                continue
            if item.is_file():
                found.append(relative.as_posix())
        return found
