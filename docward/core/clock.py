"""Wall-clock source for access rules.

Share-link expiry and version ordering compare epoch milliseconds. Callers
go through ``clock.now_ms()`` (module attribute, not a bound import) so tests
can move time by patching one function.
"""

import time

MS_PER_DAY = 86_400_000


def now_ms() -> int:
    return int(time.time() * 1000)
