"""Command line entrypoints for hemofsm."""
