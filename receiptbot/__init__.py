"""Receipt interpretation pipeline: photographed receipt in, expense draft out."""

__version__ = "0.1.0"
