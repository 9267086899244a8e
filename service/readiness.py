import threading


class ReadinessFlag:
    """
    Process readiness reported to health checks.

    Starts unset and is set once, after the server's listening sockets are
    bound. ``threading.Event`` gives atomic reads and writes without a lock
    held by readers.
    """

    def __init__(self):
        self._ready = threading.Event()

    def mark_ready(self) -> None:
        self._ready.set()

    def is_ready(self) -> bool:
        return self._ready.is_set()
