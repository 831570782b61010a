import sys

from sumchain.cli import main

sys.exit(main())
