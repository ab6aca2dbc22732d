"""Command line interface for trusted-cert."""
