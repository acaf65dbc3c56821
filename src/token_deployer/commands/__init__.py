"""Post-deployment commands: token administration and explorer verification."""
