"""Home server services: SQLite-backed shares, connections, peers and notifications, cancellable streams, search suggestions and system status."""

__version__ = "0.1.0"