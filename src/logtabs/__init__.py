"""logtabs - filter, hide and highlight log lines with tabbed rule sets."""

__version__ = "0.1.0"
