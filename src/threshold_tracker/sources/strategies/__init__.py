"""Import all source modules to trigger @register decorators."""

from threshold_tracker.sources.strategies import chain  # noqa: F401
from threshold_tracker.sources.strategies import graphql  # noqa: F401
from threshold_tracker.sources.strategies import market_context  # noqa: F401
from threshold_tracker.sources.strategies import rendered_page  # noqa: F401
from threshold_tracker.sources.strategies import static_page  # noqa: F401
