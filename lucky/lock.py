# Copyright 2026 Canonical Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# For further info, check https://github.com/katharostech/lucky

"""The liveness lock of a unit's daemon."""

import fcntl
import io
import os
import pathlib
import time

# pause between attempts when waiting for the lock
RETRY_INTERVAL = 0.05


class DaemonLock:
    """Exclusive lock on a file, held by the unit's daemon while it is alive.

    The lock is released by the kernel when the process dies, so a crashed
    daemon never blocks the next one.
    """

    def __init__(self, path: pathlib.Path):
        self.path = path
        self._lock_file: io.TextIOBase | None = None

    @property
    def locked(self) -> bool:
        """Tell if this object holds the lock."""
        return self._lock_file is not None

    def acquire(self, timeout: float = 0) -> bool:
        """Try to take the lock, for up to timeout seconds; write our pid in the file."""
        deadline = time.monotonic() + timeout
        while not self._try_acquire():
            if time.monotonic() >= deadline:
                return False
            time.sleep(RETRY_INTERVAL)
        return True

    def _try_acquire(self) -> bool:
        lock_file = self.path.open("a+")
        try:
            # Exclusive lock, but non-blocking.
            fcntl.flock(lock_file, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            lock_file.close()
            return False

        lock_file.seek(0)
        lock_file.truncate()
        lock_file.write(str(os.getpid()))
        lock_file.flush()
        os.fsync(lock_file.fileno())
        self._lock_file = lock_file
        return True

    def release(self) -> None:
        """Release the lock, if held."""
        if self._lock_file is None:
            return
        self._lock_file.seek(0)
        self._lock_file.truncate()
        fcntl.flock(self._lock_file, fcntl.LOCK_UN)
        self._lock_file.close()
        self._lock_file = None


def is_lock_held(path: pathlib.Path) -> bool:
    """Tell if some process holds the lock at the given path."""
    if not path.exists():
        return False
    probe = DaemonLock(path)
    if probe.acquire():
        probe.release()
        return False
    return True


def read_lock_pid(path: pathlib.Path) -> int | None:
    """Return the pid written in the lock file, if any."""
    try:
        return int(path.read_text().strip())
    except (OSError, ValueError):
        return None

