"""Allow ``python -m platformstats``."""

import sys

from .cli import main

sys.exit(main())
