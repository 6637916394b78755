import sys

from templatex.cli import main

sys.exit(main())
