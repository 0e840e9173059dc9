# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-16
"""
CLI entrypoint for `python -m ownership`.
"""

from ownership.cli import main

if __name__ == "__main__":
	import sys
	sys.exit(main())
