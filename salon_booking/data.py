# salon_booking/data.py

import os

shop_settings = {
    # Single fixed offset for every wall-clock time in the shop
    "utc_offset": os.getenv("SALON_UTC_OFFSET", "-03:00"),
    "slot_minutes": int(os.getenv("SALON_SLOT_MINUTES", "10")),
    "gap_minutes": int(os.getenv("SALON_GAP_MINUTES", "10")),
    "default_open": "08:00",
    "default_close": "20:00",
    # Sunday=0 ... Saturday=6
    "default_open_days": [2, 3, 4, 5, 6],
    "day_picker_days": 14,
}

# Lunch applies to every professional and is not configurable
LUNCH_START = "12:00"
LUNCH_END = "13:00"
