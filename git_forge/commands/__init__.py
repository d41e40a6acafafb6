"""Subcommand handlers; each takes the parsed ``argparse.Namespace``."""
