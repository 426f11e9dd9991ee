"""
Models for the IPWS booking API payloads.

IPWS uses Hungarian-notation field names (iID, sName, aoTrains, ...); the
models below keep those as aliases and expose snake_case attributes.
Timestamps travel in the "/Date(<milliseconds>)/" form.
"""

import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

IPWS_DATE_PATTERN = re.compile(r"^/Date\((-?\d+)(?:[+-]\d{4})?\)/$")


def format_ipws_date(epoch_ms: int) -> str:
    """Serialize epoch milliseconds into the IPWS embedded-epoch string"""
    return f"/Date({int(epoch_ms)})/"


def parse_ipws_date(raw: str) -> datetime:
    """
    Parse an IPWS "/Date(ms)/" literal into an aware UTC datetime.

    A trailing "+hhmm" offset is informational only; the millisecond value
    is already an absolute instant.
    """
    match = IPWS_DATE_PATTERN.match(raw.strip())
    if not match:
        raise ValueError(f"Not an IPWS date literal: {raw!r}")
    return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)


def to_iso_instant(value: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision, e.g. 2023-11-14T22:13:20.000Z"""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def build_line_label(tokens: Iterable[Any]) -> str:
    """Join the truthy line tokens with single spaces; 0, "", None and False are dropped"""
    parts = [str(token).strip() for token in tokens if token]
    return " ".join(part for part in parts if part)


class IpwsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


# ============ Station Search ============

class Station(IpwsModel):
    """Resolved station: canonical list id and display name"""
    id: int = Field(..., alias="iListID")
    name: str = Field(..., alias="sName")

    def descriptor(self) -> dict:
        """Station descriptor as the journey search expects it"""
        return {"iListID": self.id, "sName": self.name}


# ============ Journey Search ============

class Leg(IpwsModel):
    """One train within a connection (an element of aoTrains)"""
    departure_time: datetime = Field(..., alias="dtDateTime1")
    arrival_time: datetime = Field(..., alias="dtDateTime2")
    departure_station_name: str = Field("", alias="sStationName1")
    arrival_station_name: str = Field("", alias="sStationName2")
    train_type: Optional[str] = Field(None, alias="sType")
    number1: Optional[str] = Field(None, alias="sNum1")
    number2: Optional[str] = Field(None, alias="sNum2")
    number3: Optional[str] = Field(None, alias="sNum3")

    @field_validator("departure_time", "arrival_time", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_ipws_date(value)
        return value

    @field_validator("departure_station_name", "arrival_station_name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("train_type", "number1", "number2", "number3", mode="before")
    @classmethod
    def _stringify_token(cls, value: Any) -> Any:
        if not value:
            return None
        return str(value)

    @property
    def line_label(self) -> str:
        return build_line_label([self.train_type, self.number1, self.number2, self.number3])


class Connection(IpwsModel):
    """A candidate connection; N legs means N-1 transfers"""
    id: int = Field(..., alias="iID")
    legs: List[Leg] = Field(default_factory=list, alias="aoTrains")

    @field_validator("legs", mode="before")
    @classmethod
    def _null_legs(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def transfers(self) -> int:
        return max(len(self.legs) - 1, 0)


class SearchResult(IpwsModel):
    """Search handle plus connections in the order IPWS returned them"""
    handle: int
    connections: List[Connection] = Field(default_factory=list)

    @property
    def connection_ids(self) -> List[int]:
        return [connection.id for connection in self.connections]
