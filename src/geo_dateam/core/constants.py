"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DATE_FORMAT = "%Y-%m-%d"

DEFAULT_SESSION_DAYS = 7

MIN_PASSWORD_LENGTH = 6
DEFAULT_PING_LIMIT = 50

# Categories offered by the expense form; any non-empty label is accepted.
EXPENSE_CATEGORIES = (
    "carburant",
    "repas",
    "hebergement",
    "equipement",
    "transport",
    "autre",
)

REMINDER_SUBJECT = "Rappel de pointage - Geo DaTeam"

# Column bounds of database/schema.sql: DECIMAL(10,2) amounts, 8-place coordinates.
MAX_EXPENSE_AMOUNT = Decimal("99999999.99")
COORDINATE_PLACES = 8
