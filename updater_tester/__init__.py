"""updater-tester — validate the upstream assumptions of the Rust and fastfetch updaters."""

__version__ = "1.2.0"
