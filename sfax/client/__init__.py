"""Sfax API client and its HTTP transport.

Security notes:
- Treat server responses as untrusted input.
- Avoid printing or logging raw file bytes, tokens or API keys.
"""

from .api import SfaxClient  # noqa: F401
from .http import HttpResponse, SfaxHttpClient  # noqa: F401
