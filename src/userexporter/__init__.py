"""userexporter — Prometheus exporter for logged-in Unix users."""

__version__ = "0.1.0"
