#!/usr/bin/env python3
"""
Entry point for running scripts as a module.

Usage:
    python -m scripts                          # Show available commands
    python -m scripts deploy_tokens --dry-run  # Compile and estimate gas
    python -m scripts interact_with_tokens info MTK
    python -m scripts verify_contracts sepolia
"""
import sys


def main():
    """Main entry point for scripts module."""
    available_commands = {
        "deploy_tokens": "Compile and deploy the tokens in tokens.json",
        "interact_with_tokens": "Transfer, mint, burn, pause or inspect deployed tokens",
        "verify_contracts": "Verify deployed tokens on the block explorer",
    }

    if len(sys.argv) < 2:
        print("Usage: python -m scripts <command>")
        print("\nAvailable commands:")
        for cmd, desc in available_commands.items():
            print(f"  {cmd:30} - {desc}")
        print("\nExample: python -m scripts deploy_tokens --dry-run")
        sys.exit(0)

    command = sys.argv[1]
    args = sys.argv[2:]

    if command == "deploy_tokens":
        from scripts.deploy_tokens import main as run
    elif command == "interact_with_tokens":
        from scripts.interact_with_tokens import main as run
    elif command == "verify_contracts":
        from scripts.verify_contracts import main as run
    else:
        print(f"Unknown command: {command}")
        print("Run 'python -m scripts' to see available commands.")
        sys.exit(1)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
