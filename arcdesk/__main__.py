import sys

from arcdesk.cli import main

raise SystemExit(main(sys.argv[1:]))
