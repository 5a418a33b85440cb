"""ORM models package."""
from .base import Base
from .charge_box import ChargeBox, Connector
from .meter_value import ConnectorMeterValue
from .ocpp_tag import OcppTag
from .transaction import Transaction

__all__ = [
    "Base",
    "ChargeBox",
    "Connector",
    "ConnectorMeterValue",
    "OcppTag",
    "Transaction",
]
