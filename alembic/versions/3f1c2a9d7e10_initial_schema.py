"""initial schema: agencies, users, vouchers and voucher sub-records

Revision ID: 3f1c2a9d7e10
Revises: 
Create Date: 2026-10-19 10:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("SUPERADMIN", "ADMIN", "AGENCY", name="user_role")
flight_direction = sa.Enum("OUTBOUND", "RETURN", name="flight_direction")


def _voucher_fk() -> sa.Column:
    return sa.Column(
        "voucher_id", sa.String(36),
        sa.ForeignKey("vouchers.id", ondelete="CASCADE"), nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "agencies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("phone", sa.String(50)),
        sa.Column("email", sa.String(255)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("logo_url", sa.String(1024)),
        sa.Column("primary_color", sa.String(32)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("agency_id", sa.String(36), sa.ForeignKey("agencies.id", ondelete="SET NULL")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_agency_id", "users", ["agency_id"])

    op.create_table(
        "vouchers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "agency_id", sa.String(36),
            sa.ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("reservation_code", sa.String(64), nullable=False, unique=True),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_vouchers_agency_id", "vouchers", ["agency_id"])

    op.create_table(
        "voucher_flights",
        sa.Column("id", sa.String(36), primary_key=True),
        _voucher_fk(),
        sa.Column("direction", flight_direction, nullable=False),
        sa.Column("segment_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("flight_number", sa.String(32)),
        sa.Column("departure_time", sa.String(32)),
        sa.Column("arrival_time", sa.String(32)),
        sa.Column("embark_airport", sa.String(120)),
        sa.Column("disembark_airport", sa.String(120)),
        sa.Column("flight_date", sa.Date()),
    )
    op.create_index("ix_voucher_flights_voucher_id", "voucher_flights", ["voucher_id"])

    op.create_table(
        "voucher_hotels",
        sa.Column("id", sa.String(36), primary_key=True),
        _voucher_fk(),
        sa.Column("hotel_name", sa.String(255), nullable=False),
        sa.Column("meal_plan", sa.String(120)),
        sa.Column("room_type", sa.String(120)),
        sa.Column("check_in_time", sa.String(32)),
        sa.Column("check_out_time", sa.String(32)),
        sa.UniqueConstraint("voucher_id"),
    )

    op.create_table(
        "voucher_transfers",
        sa.Column("id", sa.String(36), primary_key=True),
        _voucher_fk(),
        sa.Column("receptive_name", sa.String(255)),
        sa.Column("receptive_phone", sa.String(50)),
        sa.UniqueConstraint("voucher_id"),
    )

    op.create_table(
        "voucher_stopovers",
        sa.Column("id", sa.String(36), primary_key=True),
        _voucher_fk(),
        sa.Column("location", sa.String(255)),
        sa.Column("duration", sa.String(64)),
        sa.UniqueConstraint("voucher_id"),
    )

    op.create_table(
        "voucher_tours",
        sa.Column("id", sa.String(36), primary_key=True),
        _voucher_fk(),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date_time", sa.String(64)),
        sa.Column("meeting_point", sa.String(255)),
    )
    op.create_index("ix_voucher_tours_voucher_id", "voucher_tours", ["voucher_id"])

    op.create_table(
        "voucher_travel_insurances",
        sa.Column("id", sa.String(36), primary_key=True),
        _voucher_fk(),
        sa.Column("provider_name", sa.String(255)),
        sa.Column("provider_phone", sa.String(50)),
        sa.UniqueConstraint("voucher_id"),
    )


def downgrade() -> None:
    op.drop_table("voucher_travel_insurances")
    op.drop_index("ix_voucher_tours_voucher_id", table_name="voucher_tours")
    op.drop_table("voucher_tours")
    op.drop_table("voucher_stopovers")
    op.drop_table("voucher_transfers")
    op.drop_table("voucher_hotels")
    op.drop_index("ix_voucher_flights_voucher_id", table_name="voucher_flights")
    op.drop_table("voucher_flights")
    op.drop_index("ix_vouchers_agency_id", table_name="vouchers")
    op.drop_table("vouchers")
    op.drop_index("ix_users_agency_id", table_name="users")
    op.drop_table("users")
    op.drop_table("agencies")
    flight_direction.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
