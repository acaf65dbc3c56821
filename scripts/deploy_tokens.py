#!/usr/bin/env python3
"""Deploy every token in tokens.json. See ``token_deployer.setup.deploy_tokens``."""
import sys

from token_deployer.setup.deploy_tokens import main

if __name__ == "__main__":
    sys.exit(main())
