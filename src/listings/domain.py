"""Listings bounded context — property engagement and moderation.

Holds the Property aggregate with its view/favorite counters, buyer reviews
(each with at most one owner response), and the append-only moderation
reports filed against listings and their reviews.
"""

from protean.domain import Domain

from listings.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
listings = Domain(name="listings")
