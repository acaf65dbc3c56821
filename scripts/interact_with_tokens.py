#!/usr/bin/env python3
"""Token interaction CLI. See ``token_deployer.commands.interact``."""
import sys

from token_deployer.commands.interact import main

if __name__ == "__main__":
    sys.exit(main())
