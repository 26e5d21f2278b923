"""
Read/write lock guarding resource state.

.. Licensed under the MIT license, see the LICENSE file.
"""


import threading


class _Guard(object):
    def __init__(self, acquire, release):
        self._acquire = acquire
        self._release = release

    def __enter__(self):
        self._acquire()
        return self

    def __exit__(self, *exc_info):
        self._release()
        return False


class ReadWriteLock(object):
    """
    Lock allowing many concurrent readers or a single writer.

    Both sides are available as context managers::

        >>> lock = ReadWriteLock()
        >>> with lock.read_lock:
        ...     pass
        >>> with lock.write_lock:
        ...     pass

    The writing thread may re-enter the write lock and may take the read
    lock. A reader cannot upgrade to the write lock.
    """
    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._readers = {}
        self._writer = None
        self._write_depth = 0

        #: Context manager for shared access.
        self.read_lock = _Guard(self.acquire_read, self.release_read)

        #: Context manager for exclusive access.
        self.write_lock = _Guard(self.acquire_write, self.release_write)

    def acquire_read(self):
        me = threading.get_ident()
        with self._condition:
            while self._writer is not None and self._writer != me:
                self._condition.wait()
            self._readers[me] = self._readers.get(me, 0) + 1

    def release_read(self):
        me = threading.get_ident()
        with self._condition:
            count = self._readers.get(me)
            if not count:
                raise RuntimeError('Cannot release an unacquired read lock')
            if count == 1:
                del self._readers[me]
                self._condition.notify_all()
            else:
                self._readers[me] = count - 1

    def acquire_write(self):
        me = threading.get_ident()
        with self._condition:
            if self._writer == me:
                self._write_depth += 1
                return
            if me in self._readers:
                raise RuntimeError('Cannot upgrade a read lock to a write lock')
            while self._writer is not None or self._readers:
                self._condition.wait()
            self._writer = me
            self._write_depth = 1

    def release_write(self):
        with self._condition:
            if self._writer != threading.get_ident():
                raise RuntimeError('Cannot release an unacquired write lock')
            self._write_depth -= 1
            if not self._write_depth:
                self._writer = None
                self._condition.notify_all()
