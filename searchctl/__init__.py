"""Command-line layer for managing search clusters: profiles, REST calls, k-NN, anomaly detection and shell completion."""

__version__ = "1.0.0"