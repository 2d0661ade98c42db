"""Allow ``python -m songcheck``."""

from songcheck.infrastructure.cli.app import main

raise SystemExit(main())
