import logging
import signal
import threading


class ShutdownCoordinator:
    """
    Turns the first SIGINT/SIGTERM into a KeyboardInterrupt in the main thread,
    which ends the waitress dispatch loop. Later signals are ignored.
    """

    def __init__(self):
        self.requested = threading.Event()

    def install(self, signals=(signal.SIGINT, signal.SIGTERM)):
        for signum in signals:
            signal.signal(signum, self.handle)

    def handle(self, signum, frame):
        if self.requested.is_set():
            logging.info("Already shutting down, ignoring signal %s", signum)
            return
        self.requested.set()
        logging.info("Shutting down!")
        raise KeyboardInterrupt

    def serve(self, server):
        """Run `server` until a shutdown signal, then stop accepting connections."""
        try:
            # waitress drains its task queue itself when the loop is interrupted
            server.run()
        except KeyboardInterrupt:
            self.requested.set()
        finally:
            server.close()
