"""Meeting assistant: recording to transcript, summary and follow-up email."""

__version__ = "0.1.0"

from meetassist.main import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
