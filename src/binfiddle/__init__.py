"""binfiddle — binary diff and patch toolkit."""

__version__ = "0.1.0"
