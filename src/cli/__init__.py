"""Command line front end for repository management."""
