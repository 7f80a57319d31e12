import sys

from code_flattener.cli import main

sys.exit(main())
