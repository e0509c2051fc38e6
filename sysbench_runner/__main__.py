import sys

from sysbench_runner.cli import main

sys.exit(main())
