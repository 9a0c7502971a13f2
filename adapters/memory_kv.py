#Description: In-process key-value tree with Firebase-like path semantics (tests and dryrun).

import copy
from typing import Any

from utils.push_id import generate_push_id


def split_path(path: str) -> list[str]:
    return [p for p in path.strip("/").split("/") if p]


class MemoryTransport:
    def __init__(self):
        self.root: dict[str, Any] = {}

    async def push(self, path: str, value: Any) -> str:
        key = generate_push_id()
        await self.set(f"{path}/{key}", value)
        return key

    async def set(self, path: str, value: Any) -> None:
        parts = split_path(path)
        if value is None:
            self._remove(parts)
            return
        node = self.root
        for p in parts[:-1]:
            child = node.get(p)
            if not isinstance(child, dict):
                child = {}
                node[p] = child
            node = child
        node[parts[-1]] = copy.deepcopy(value)

    async def get(self, path: str) -> Any:
        node: Any = self.root
        for p in split_path(path):
            if not isinstance(node, dict) or p not in node:
                return None
            node = node[p]
        return copy.deepcopy(node)

    async def remove(self, path: str) -> None:
        self._remove(split_path(path))

    def _remove(self, parts: list[str]) -> None:
        trail = [self.root]
        for p in parts[:-1]:
            nxt = trail[-1].get(p)
            if not isinstance(nxt, dict):
                return
            trail.append(nxt)
        trail[-1].pop(parts[-1], None)
        # empty parents disappear, as they do in the realtime database
        for depth in range(len(parts) - 1, 0, -1):
            if trail[depth]:
                break
            trail[depth - 1].pop(parts[depth - 1], None)

    async def aclose(self):
        pass
