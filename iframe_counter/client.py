import re
import sys
import time
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import requests

BASE_URL = "http://127.0.0.1:32069/"
REFERER = "https://loadtest.example/"
REQUESTS_PER_CLIENT = 1000

_digits = re.compile(r"\d+")


class LoadResult(namedtuple("LoadResult", "num_clients total_requests elapsed last_count")):
    @property
    def throughput(self):
        return self.total_requests / self.elapsed if self.elapsed else float("inf")

    def __str__(self):
        return (
            f"{self.num_clients} clients | "
            f"time={self.elapsed:.2f}s | "
            f"throughput={self.throughput:.1f} rps | "
            f"count={self.last_count}"
        )


def read_count(html):
    """Pull the visit count out of a page rendered from the default template."""
    _, label, rest = html.rpartition("Visits:")
    match = _digits.search(rest) if label else None
    return int(match.group()) if match else None


def visit_repeatedly(base_url, referer, times, barrier):
    """One embedding page reloading the iframe `times` times."""
    session = requests.Session()
    headers = {"Referer": referer}
    barrier.wait()
    for _ in range(times):
        r = session.get(base_url, headers=headers, timeout=5)
        if r.status_code != 200:
            raise RuntimeError(f"Visit from {referer} failed with {r.status_code}")


def run_load_test(base_url, num_clients, requests_per_client, referer=REFERER):
    barrier = Barrier(num_clients)
    start = time.time()

    with ThreadPoolExecutor(max_workers=num_clients) as ex:
        futures = [
            ex.submit(visit_repeatedly, base_url, referer, requests_per_client, barrier)
            for _ in range(num_clients)
        ]
        for f in futures:
            f.result()

    elapsed = time.time() - start
    # one more visit to read back where the counter ended up
    page = requests.get(base_url, headers={"Referer": referer}, timeout=5)
    return LoadResult(num_clients, num_clients * requests_per_client, elapsed, read_count(page.text))


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    base_url = argv[0] if argv else BASE_URL
    for num_clients in [1, 2, 5, 10]:
        # a referer per run so each run's count starts from zero on a fresh server
        referer = f"{REFERER}{num_clients}-clients"
        print(run_load_test(base_url, num_clients, REQUESTS_PER_CLIENT, referer))


if __name__ == "__main__":
    main()
