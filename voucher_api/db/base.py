from voucher_api.db.mixins import Base

# Import all models so Alembic can detect them
from voucher_api.db.models.agency import Agency
from voucher_api.db.models.user import User
from voucher_api.db.models.voucher import Voucher
from voucher_api.db.models.voucher_flight import VoucherFlight
from voucher_api.db.models.voucher_hotel import VoucherHotel
from voucher_api.db.models.voucher_transfer import VoucherTransfer
from voucher_api.db.models.voucher_stopover import VoucherStopover
from voucher_api.db.models.voucher_tour import VoucherTour
from voucher_api.db.models.travel_insurance import TravelInsurance
