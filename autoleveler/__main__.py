import sys

from autoleveler.cli import main

sys.exit(main())
