"""Entry point for the requirements traceability tool.

Executing ``python -m rqm`` forwards to the CLI defined in ``rqm.cli``.
"""
import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
