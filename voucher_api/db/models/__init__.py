# voucher_api/db/models/__init__.py
from .agency import Agency
from .user import User, UserRole
from .voucher import Voucher
from .voucher_flight import VoucherFlight, FlightDirection
from .voucher_hotel import VoucherHotel
from .voucher_transfer import VoucherTransfer
from .voucher_stopover import VoucherStopover
from .voucher_tour import VoucherTour
from .travel_insurance import TravelInsurance
