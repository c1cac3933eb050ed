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

import os
import threading
import time

from lucky.lock import DaemonLock, is_lock_held, read_lock_pid


def test_acquire_and_release(tmp_path):
    lock_path = tmp_path / "daemon.lock"
    lock = DaemonLock(lock_path)

    assert lock.acquire()
    assert lock.locked
    assert read_lock_pid(lock_path) == os.getpid()
    assert is_lock_held(lock_path)

    lock.release()
    assert not lock.locked
    assert not is_lock_held(lock_path)
    assert read_lock_pid(lock_path) is None


def test_acquire_exclusive(tmp_path):
    """A second holder cannot take the lock until the first releases it."""
    lock_path = tmp_path / "daemon.lock"
    first = DaemonLock(lock_path)
    second = DaemonLock(lock_path)

    assert first.acquire()
    assert not second.acquire()
    assert not second.locked
    # the failed attempt must not clobber the holder's pid
    assert read_lock_pid(lock_path) == os.getpid()

    first.release()
    assert second.acquire()
    second.release()


def test_release_not_held(tmp_path):
    lock = DaemonLock(tmp_path / "daemon.lock")

    lock.release()

    assert not lock.locked


def test_is_lock_held_missing_file(tmp_path):
    assert not is_lock_held(tmp_path / "daemon.lock")


def test_is_lock_held_stale_file(tmp_path):
    """A lock file left by a dead process does not count as held."""
    lock_path = tmp_path / "daemon.lock"
    lock_path.write_text("999999")

    assert not is_lock_held(lock_path)


def test_read_lock_pid_garbage(tmp_path):
    lock_path = tmp_path / "daemon.lock"
    lock_path.write_text("not a pid")

    assert read_lock_pid(lock_path) is None


def test_acquire_waits_for_release(tmp_path):
    lock_path = tmp_path / "daemon.lock"
    holder = DaemonLock(lock_path)
    assert holder.acquire()
    timer = threading.Timer(0.1, holder.release)
    timer.start()

    waiter = DaemonLock(lock_path)
    try:
        assert waiter.acquire(timeout=5)
    finally:
        timer.join()
        waiter.release()


def test_acquire_timeout(tmp_path):
    lock_path = tmp_path / "daemon.lock"
    holder = DaemonLock(lock_path)
    assert holder.acquire()

    start = time.monotonic()
    try:
        assert not DaemonLock(lock_path).acquire(timeout=0.2)
    finally:
        holder.release()
    assert time.monotonic() - start >= 0.2
