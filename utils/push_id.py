#Description: Chronologically sortable push-id generator (Firebase push-key layout).

import random
import time
from threading import Lock

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"

_lock = Lock()
_last_ms = 0
_last_rand: list[int] = [0] * 12
_rng = random.SystemRandom()


def generate_push_id(now_ms: int | None = None) -> str:
    """
    Return a 20 char key: 8 chars of millisecond timestamp followed by 12 random chars.

    Keys generated within the same millisecond reuse the previous random part
    incremented by one, so they stay unique and sort in creation order.
    """
    global _last_ms, _last_rand
    ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    with _lock:
        duplicate = ms == _last_ms
        _last_ms = ms
        if not duplicate:
            _last_rand = [_rng.randrange(64) for _ in range(12)]
        else:
            i = 11
            while i >= 0 and _last_rand[i] == 63:
                _last_rand[i] = 0
                i -= 1
            if i >= 0:
                _last_rand[i] += 1
        rand = list(_last_rand)

    ts_chars = []
    for _ in range(8):
        ts_chars.append(PUSH_CHARS[ms % 64])
        ms //= 64
    return "".join(reversed(ts_chars)) + "".join(PUSH_CHARS[r] for r in rand)
