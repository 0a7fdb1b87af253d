import sys

from cpm_planner.cli import main

sys.exit(main())
