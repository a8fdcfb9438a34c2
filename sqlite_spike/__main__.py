import sys

from sqlite_spike.run_scenarios import main

sys.exit(main())
