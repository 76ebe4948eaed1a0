"""CuraLink: discovery of medical experts, publications and clinical trials for patients and researchers."""

__version__ = "0.1.0"
