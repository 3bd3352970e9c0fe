"""SeAT Installer — provision a SeAT production instance on this host."""

__version__ = "0.1.0"
