from datetime import date, datetime
from typing import Annotated, List

from pydantic import ConfigDict, Field

from voucher_api.db.models.voucher_flight import FlightDirection
from voucher_api.schemas.agency import AgencyPublicOut
from voucher_api.schemas.common import CamelModel


# ---------- input ----------
# Fields are deliberately loose (all optional); business rules and their
# messages live in services.voucher_pipeline so the checks run in a fixed order.

class _VoucherInput(CamelModel):
    # flight numbers etc. sometimes arrive as JSON numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)


# lengths mirror the column sizes in db.models
Short = Annotated[str | None, Field(max_length=32)]
Medium = Annotated[str | None, Field(max_length=64)]
Place = Annotated[str | None, Field(max_length=120)]
Phone = Annotated[str | None, Field(max_length=50)]
Text = Annotated[str | None, Field(max_length=255)]


class FlightConnectionIn(_VoucherInput):
    flight_number: Short = None
    departure_time: Short = None
    arrival_time: Short = None
    disembark_airport: Place = None
    flight_date: date | None = None


class FlightIn(_VoucherInput):
    direction: str | None = None
    flight_number: Short = None
    departure_time: Short = None
    arrival_time: Short = None
    embark_airport: Place = None
    disembark_airport: Place = None
    flight_date: date | None = None
    connections: List[FlightConnectionIn] = Field(default_factory=list)


class HotelIn(_VoucherInput):
    hotel_name: Text = None
    meal_plan: Place = None
    room_type: Place = None
    check_in_time: Short = None
    check_out_time: Short = None


class TransferIn(_VoucherInput):
    receptive_name: Text = None
    receptive_phone: Phone = None


class StopoverIn(_VoucherInput):
    location: Text = None
    duration: Medium = None


class TourIn(_VoucherInput):
    name: Text = None
    date_time: Medium = None
    meeting_point: Text = None


class TravelInsuranceIn(_VoucherInput):
    provider_name: Text = None
    provider_phone: Phone = None


class VoucherCreate(_VoucherInput):
    reservation_code: Medium = None
    client_name: Text = None
    flights: List[FlightIn] | None = None
    hotel: HotelIn | None = None
    transfer: TransferIn | None = None
    stopover: StopoverIn | None = None
    tours: List[TourIn] | None = None
    travel_insurance: TravelInsuranceIn | None = None


# ---------- output ----------

class FlightOut(CamelModel):
    id: str
    direction: FlightDirection
    segment_order: int
    flight_number: str | None
    departure_time: str | None
    arrival_time: str | None
    embark_airport: str | None
    disembark_airport: str | None
    flight_date: date | None


class HotelOut(CamelModel):
    id: str
    hotel_name: str
    meal_plan: str | None
    room_type: str | None
    check_in_time: str | None
    check_out_time: str | None


class TransferOut(CamelModel):
    id: str
    receptive_name: str | None
    receptive_phone: str | None


class StopoverOut(CamelModel):
    id: str
    location: str | None
    duration: str | None


class TourOut(CamelModel):
    id: str
    name: str
    date_time: str | None
    meeting_point: str | None


class TravelInsuranceOut(CamelModel):
    id: str
    provider_name: str | None
    provider_phone: str | None


class VoucherSummaryOut(CamelModel):
    id: str
    agency_id: str
    reservation_code: str
    client_name: str
    created_at: datetime


class VoucherOut(VoucherSummaryOut):
    flights: List[FlightOut]
    hotel: HotelOut | None
    transfer: TransferOut | None
    stopover: StopoverOut | None
    tours: List[TourOut]
    travel_insurance: TravelInsuranceOut | None


class VoucherPublicOut(VoucherOut):
    agency: AgencyPublicOut
