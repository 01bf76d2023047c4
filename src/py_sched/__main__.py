"""Allow ``python -m py_sched``."""

from py_sched.cli import main

raise SystemExit(main())
