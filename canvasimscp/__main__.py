import sys

from canvasimscp.cli import main

sys.exit(main())
