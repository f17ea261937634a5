class LegiMonitorError(Exception):
    pass


class FetchError(LegiMonitorError):
    pass


class FetchTimeoutError(FetchError):
    def __init__(self, url, timeout):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s loading {url}")


class NotifyError(LegiMonitorError):
    pass


class HistoryError(LegiMonitorError):
    pass


class StorageError(LegiMonitorError):
    pass
