"""Allow running auditpager as ``python -m auditpager``."""

from .cli import main

if __name__ == "__main__":
    main()
