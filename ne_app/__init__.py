"""Application-level facade between UI layers and the node engine."""

from ne_common import configure_logging as _configure_logging

_configure_logging()

from .engine import NodeEngine  # noqa: E402
from .interfaces import ResourceStore, VariantPresenter  # noqa: E402
from .viewmodels import ViewState  # noqa: E402

__all__ = ["NodeEngine", "ResourceStore", "VariantPresenter", "ViewState"]
