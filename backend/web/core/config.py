"""Configuration constants for the Config Keeper web backend."""

# Shutdown: how long to wait for in-flight callback deliveries
SHUTDOWN_DRAIN_TIMEOUT_SEC = 30

# Outbound callback client
HTTP_CLIENT_MAX_CONNECTIONS = 100
