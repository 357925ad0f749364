"""Storage Box mount provisioning (Python-first, pipeline-driven).

Core design goals:
- Negotiate the SMB dialect instead of hardcoding one
- Bounded, sequential mount retries with advisory diagnostics
- Exactly one persistence backend per mount point (fstab or systemd units)
- Dry-run everywhere
- Centralized logging, credentials never logged
"""

__version__ = "1.0.1"

__all__ = ["__version__"]
