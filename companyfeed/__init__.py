"""companyfeed: live company list from a realtime database.

A subscription to the ``companies`` collection is projected into
render-ready state (loading flag, error, records sorted by id) and drawn
as a "Recent List" strip plus the full list, with each company's webpage
one command away.
"""

__version__ = "0.1.0"
__description__ = "Live company list from a Firebase Realtime Database collection"

from companyfeed.core.session import CompanyFeedSession
from companyfeed.core.subscriber import DataSubscriber, Subscription
from companyfeed.models.company import Company
from companyfeed.models.events import SnapshotEvent
from companyfeed.monitor.projection import CompanyListState, ViewModelProjector

__all__ = [
    "Company",
    "CompanyFeedSession",
    "CompanyListState",
    "DataSubscriber",
    "SnapshotEvent",
    "Subscription",
    "ViewModelProjector",
    "__version__",
]
