# ABOUTME: Click subcommand modules for the lyyyra CLI.
# ABOUTME: Each module defines one command registered by lyyyra.cli.
