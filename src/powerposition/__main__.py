"""Allow ``python -m powerposition``."""

import sys

from powerposition.cli import main

sys.exit(main())
