"""ccxpolicy command-line interface."""
