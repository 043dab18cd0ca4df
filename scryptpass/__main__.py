import sys

from scryptpass.cli import main

sys.exit(main())
