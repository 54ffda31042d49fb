# jobs/models.py
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True)
class ListMetadata:
    name: str
    description: Optional[str] = None
    creator: Optional[str] = None
    share_url: Optional[str] = None

    def __post_init__(self):
        if _blank(self.name):
            raise ValueError('A place list needs a non-empty name.')


@dataclass(frozen=True)
class Place:
    """One pin in the list. Coordinates come as a pair or not at all."""
    name: str
    address: Optional[str] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self):
        if _blank(self.name):
            raise ValueError('A place needs a non-empty name.')
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError(
                f'Place {self.name!r} has only one of latitude/longitude.'
            )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None


@dataclass(frozen=True)
class GoogleMapsListData:
    metadata: ListMetadata
    places: Tuple[Place, ...] = ()

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> Optional[str]:
        return self.metadata.description

    @property
    def creator(self) -> Optional[str]:
        return self.metadata.creator

    @property
    def share_url(self) -> Optional[str]:
        return self.metadata.share_url


@dataclass
class ExportJob:
    """
    One list URL inside a bulk export.
    Each gets its own status and its own output files.
    """
    STATUS = (
        'pending',
        'fetching',
        'parsing',
        'writing',
        'completed',
        'failed',
    )

    url: str
    status: str = 'pending'
    status_message: str = ''
    error_message: str = ''
    list_name: str = ''
    total_places: int = 0
    outputs: List[str] = field(default_factory=list)

    def __str__(self):
        return f"ExportJob({self.url}) — {self.status}"

    def set_status(self, status: str, message: str = ''):
        if status not in self.STATUS:
            raise ValueError(f'Unknown export job status: {status}')
        self.status = status
        self.status_message = message

    @property
    def finished(self) -> bool:
        return self.status in ('completed', 'failed')
