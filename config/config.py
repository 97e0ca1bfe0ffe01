"""Reference data shared by every environment.

Cohorts double as fee-bearing classes. Exam slots are seeded once; only the
listed cohorts may book exam seats.
"""

COHORTS = [
    {"name": "Grade 6", "monthly_fee": 2000},
    {"name": "Grade 7", "monthly_fee": 2000},
    {"name": "Grade 8", "monthly_fee": 2000},
    {"name": "O/L", "monthly_fee": 2500},
]

EXAM_SLOTS = [
    {
        "label": "Session 1 - 2:00 PM to 5:00 PM",
        "start_time": "2025-12-05T14:00:00",
        "end_time": "2025-12-05T17:00:00",
        "capacity": 25,
    },
    {
        "label": "Session 2 - 5:30 PM to 8:30 PM",
        "start_time": "2025-12-05T17:30:00",
        "end_time": "2025-12-05T20:30:00",
        "capacity": 24,
    },
]

BOOKING_COHORTS = ["Grade 7", "Grade 8"]
