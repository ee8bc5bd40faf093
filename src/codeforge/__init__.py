"""CodeForge - multi-step workflow orchestration for code automation workers."""

__version__ = "0.1.0"
