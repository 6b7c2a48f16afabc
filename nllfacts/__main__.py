"""Allow ``python -m nllfacts``."""

from .cli import main

raise SystemExit(main())
