"""Allow ``python -m platereduce``."""

import sys

from platereduce.cli.run_reduce import main

sys.exit(main())
