#Description: Key-value tree stored as flattened JSON leaves in a SQL table.

import asyncio
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from adapters.memory_kv import split_path
from models.db import init_db, make_engine, make_sessionmaker
from models.orm import SignalNode
from utils.errors import PersistenceError
from utils.push_id import generate_push_id


def flatten(path: str, value: Any) -> list[tuple[str, Any]]:
    """Explode nested dicts into (leaf_path, scalar) pairs; empty dicts store nothing."""
    if isinstance(value, dict):
        out = []
        for k, v in value.items():
            out.extend(flatten(f"{path}/{k}", v))
        return out
    if value is None:
        return []
    return [(path, value)]


def unflatten(base: str, rows: list[tuple[str, Any]]) -> Any:
    tree: dict[str, Any] = {}
    for path, value in rows:
        if path == base:
            return value
        parts = split_path(path[len(base):])
        node = tree
        for p in parts[:-1]:
            node = node.setdefault(p, {})
        node[parts[-1]] = value
    return tree or None


class SqlTransport:
    def __init__(self, engine: Engine | None = None):
        self.engine = engine or make_engine()
        init_db(self.engine)
        self.Session = make_sessionmaker(self.engine)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            raise PersistenceError(f"SQL store failed: {e}") from e

    @staticmethod
    def _norm(path: str) -> str:
        return "/".join(split_path(path))

    def _subtree(self, path: str):
        # the path itself, its descendants, and any scalar ancestor a write would replace
        parts = split_path(path)
        ancestors = ["/".join(parts[:i]) for i in range(1, len(parts))]
        return or_(
            SignalNode.path == path,
            SignalNode.path.startswith(path + "/", autoescape=True),
            SignalNode.path.in_(ancestors),
        )

    def _set_sync(self, path: str, value: Any) -> None:
        with self.Session() as s:
            s.execute(delete(SignalNode).where(self._subtree(path)))
            for leaf, v in flatten(path, value):
                s.add(SignalNode(path=leaf, value=v))
            s.commit()

    def _get_sync(self, path: str) -> Any:
        with self.Session() as s:
            rows = s.execute(
                select(SignalNode.path, SignalNode.value).where(
                    or_(SignalNode.path == path, SignalNode.path.startswith(path + "/", autoescape=True))
                )
            ).all()
        return unflatten(path, [(r[0], r[1]) for r in rows])

    def _remove_sync(self, path: str) -> None:
        with self.Session() as s:
            s.execute(delete(SignalNode).where(
                or_(SignalNode.path == path, SignalNode.path.startswith(path + "/", autoescape=True))
            ))
            s.commit()

    async def push(self, path: str, value: Any) -> str:
        key = generate_push_id()
        await self.set(f"{path}/{key}", value)
        return key

    async def set(self, path: str, value: Any) -> None:
        await self._run(self._set_sync, self._norm(path), value)

    async def get(self, path: str) -> Any:
        return await self._run(self._get_sync, self._norm(path))

    async def remove(self, path: str) -> None:
        await self._run(self._remove_sync, self._norm(path))

    async def aclose(self):
        self.engine.dispose()
