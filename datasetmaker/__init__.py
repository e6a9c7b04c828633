"""Interactive tool for cropping labelled image regions into classification datasets."""

__version__ = "0.1.0"