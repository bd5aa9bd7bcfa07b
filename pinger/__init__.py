"""HTTP liveness/readiness service probing a remote target."""

__version__ = "0.1.0"
