"""Exception hierarchy re-exported at the package root."""
# pyright: reportUnsupportedDunderAll=false

from __future__ import annotations

from html2latex.core import exceptions as _exceptions
from html2latex.core.exceptions import *


__all__ = list(getattr(_exceptions, "__all__", []))
