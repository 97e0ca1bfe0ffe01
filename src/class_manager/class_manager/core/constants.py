"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SEAT_POSITIONS_PER_BENCH = 4

TOKEN_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
TOKEN_LENGTH = 16
DEFAULT_TOKEN_MAX_ATTEMPTS = 5

# Whole-transaction retries for a seat move picked as an InnoDB deadlock victim.
SEAT_MOVE_MAX_ATTEMPTS = 3

DEFAULT_MONTHLY_FEE = 2000
DEFAULT_SESSION_DAYS = 7

# Unique index names, shared by schema.sql and the repositories.
UQ_STUDENT_PHONE = "uq_students_phone"
UQ_STUDENT_TOKEN = "uq_students_qr_token"
UQ_BOOKING_SEAT = "uq_exam_bookings_seat"
UQ_BOOKING_STUDENT = "uq_exam_bookings_slot_student"
UQ_USERNAME = "uq_users_username"
