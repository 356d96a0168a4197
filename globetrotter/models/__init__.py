from .user.user import User
from .trips.trip_model import Trip
from .trips.stop_model import Stop
from .itinerary.activity import Activity
from .budget.budget_model import Budget
