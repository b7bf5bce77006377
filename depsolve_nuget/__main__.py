"""python -m depsolve_nuget"""

import sys

from .cli import main

sys.exit(main())
