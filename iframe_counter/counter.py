import threading


class VisitCounter:
    """Visit counts per referring page, guarded by a single lock."""

    def __init__(self, initial=None):
        self.visits = dict(initial or {})
        self.lock = threading.Lock()

    def increment_and_get(self, key):
        with self.lock:
            value = self.visits.get(key, 0) + 1
            self.visits[key] = value
            return value

    def get_count(self, key):
        with self.lock:
            return self.visits.get(key, 0)

    def snapshot(self):
        with self.lock:
            return dict(self.visits)

    def __len__(self):
        with self.lock:
            return len(self.visits)
