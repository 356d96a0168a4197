from .api import ApiError, GlobetrotterApi
from .mapper import SectionView, TripInput, TripView, map_backend_trip, build_update_payload
from .store import PendingTrip, TripStore
