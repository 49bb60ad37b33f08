class RecordingBroker:
    """Stands in for NotificationBroker; keeps what would have been published."""

    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.published: list[tuple[str, dict]] = []

    def publish(self, payload, routing_key):
        if self.fail:
            msg = "broker unreachable"
            raise ConnectionError(msg)
        self.published.append((routing_key, payload))
