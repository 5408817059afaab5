import logging
import os
import threading

from . import snapshot

FLUSH_INTERVAL = 60.0


class SnapshotFile:
    """
    The visits file. It is created at startup if missing; every flush writes a
    sibling temp file and renames it over the path, so a failed flush leaves
    the previous snapshot intact.
    """

    def __init__(self, path):
        self.path = path
        self.tmp_path = path + ".tmp"
        # fail at startup if the file can't be opened read-write
        os.close(os.open(path, os.O_RDWR | os.O_CREAT, 0o644))
        self.lock = threading.Lock()

    def load(self):
        try:
            with open(self.path, "rb") as f:
                data = f.read()
        except OSError:
            logging.exception("Could not read %s, starting with no visits", self.path)
            data = b""
        return snapshot.decode(data.decode("utf-8", errors="replace"))

    def flush(self, visits):
        data = snapshot.encode(visits).encode("utf-8")
        with self.lock:
            try:
                with open(self.tmp_path, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(self.tmp_path, self.path)
            except OSError:
                if os.path.exists(self.tmp_path):
                    os.remove(self.tmp_path)
                raise


class PeriodicFlusher(threading.Thread):
    """Writes a snapshot of the counter every `interval` seconds until stopped."""

    def __init__(self, counter, storage, interval=FLUSH_INTERVAL):
        super().__init__(name="periodic-flusher", daemon=True)
        self.counter = counter
        self.storage = storage
        self.interval = interval
        self.stopped = threading.Event()

    def run(self):
        while not self.stopped.wait(self.interval):
            self.flush_once()

    def flush_once(self):
        visits = self.counter.snapshot()
        logging.debug("Periodically saving %d sites to %s", len(visits), self.storage.path)
        try:
            self.storage.flush(visits)
        except OSError:
            logging.exception("Periodic save to %s failed, retrying next tick", self.storage.path)
            return False
        return True

    def stop(self):
        self.stopped.set()
        if self.is_alive():
            self.join()
