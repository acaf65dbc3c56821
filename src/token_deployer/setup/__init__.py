"""Deployment pipeline: orchestration, reporting and the token-deploy entry point."""
