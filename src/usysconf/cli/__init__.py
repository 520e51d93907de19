"""Command-line interface for usysconf (``usysconf run``, ``list``, ``state``)."""
