import sys

from git_preview_flow.cli.main import main

sys.exit(main())
