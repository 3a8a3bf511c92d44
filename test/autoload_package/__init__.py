# Set by the tests before the modules of this package are imported.
processor = None
