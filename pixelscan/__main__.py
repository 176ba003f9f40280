import sys

from pixelscan.cli import main

sys.exit(main())
