from .tenancy import Organization
from .stations import Station, MenuItem
from .sessions import PlaySession, SessionTimeSegment, SessionItem
from .customers import Customer

__all__ = [
    'Organization',
    'Station', 'MenuItem',
    'PlaySession', 'SessionTimeSegment', 'SessionItem',
    'Customer',
]
