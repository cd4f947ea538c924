from prometheus_client import CollectorRegistry, Counter

registry = CollectorRegistry()

sessions_started = Counter(
    "session_started", "New sessions issued to a client", registry=registry
)
flash_rotations = Counter(
    "session_flash_rotations", "Flash generation rotations", registry=registry
)
sessions_destroyed = Counter(
    "session_destroyed", "Sessions destroyed", registry=registry
)
