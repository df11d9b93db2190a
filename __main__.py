import sys

from ldp.cli import main

sys.exit(main())
