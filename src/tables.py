"""Staging table definitions (SQLAlchemy Core)."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()

# Dates are kept as ISO strings, as received from the EMR
staging_patient = Table(
    "staging_patient",
    metadata,
    Column("case_id", String(255), primary_key=True),
    Column("sex", String(50)),
    Column("date_of_birth", String(10)),
    Column("deceased", Boolean, nullable=True),
    Column("date_of_death", String(64), nullable=True),
    Column("facility_id", String(255)),
    Column("patient_clinic_no", String(255), nullable=True),
    Column("patient_name", String(255), nullable=True),
    Column("phone_number", String(64), nullable=True),
    Column("country", String(255), nullable=True),
    Column("district", String(255), nullable=True),
    Column("subcounty", String(255), nullable=True),
    Column("parish", String(255), nullable=True),
    Column("village", String(255), nullable=True),
    Column("national_id", String(255), nullable=True),
    Column("updated_date", DateTime, server_default=func.current_timestamp()),
)

staging_patient_encounters = Table(
    "staging_patient_encounters",
    metadata,
    Column("encounter_id", String(255), primary_key=True),
    Column("case_id", String(255)),
    Column("encounter_date", String(64)),
    Column("facility_id", String(255)),
    Column("encounter_type", String(255)),
    Column("obs", JSON),
    Column("updated_date", DateTime, server_default=func.current_timestamp()),
)

emr_fhir_bundles = Table(
    "emr_fhir_bundles",
    metadata,
    Column("source", String(255)),
    Column("data", JSON),
    Column("received_at", DateTime, server_default=func.current_timestamp()),
)

staging_dead_letter = Table(
    "staging_dead_letter",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("task_id", String(255), nullable=True),
    Column("reason", Text),
    Column("payload", JSON),
    Column("failed_at", DateTime, server_default=func.current_timestamp()),
)
