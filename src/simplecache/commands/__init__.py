"""Built-in sub-commands of the ``simplecache`` CLI."""
