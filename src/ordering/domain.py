"""Ordering bounded context — Orders created from paid checkout sessions.

Turns "checkout completed" payment events into Orders and hands the ordered
quantities to the inventory context, recording any inventory failure on the
order instead of losing it.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
