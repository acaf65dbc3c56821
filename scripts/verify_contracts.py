#!/usr/bin/env python3
"""Explorer verification of the latest deployment. See ``token_deployer.commands.verify``."""
import sys

from token_deployer.commands.verify import main

if __name__ == "__main__":
    sys.exit(main())
