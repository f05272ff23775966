"""Device, console and network implementations used by the CLI harness."""
