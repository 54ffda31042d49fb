# scraper/extractor.py
"""
Positional decoding of the matched list array.

The payload carries no field names, only positions. All positions live
in PayloadLayout so a payload change means editing one table. Every
read goes through a try-get accessor: an index out of range or an
element of the wrong type is "absent", never an exception.

Layout "placelist-v1", reverse-engineered from captured list pages:

    list[2][2]        share URL
    list[3][0]        creator
    list[4]           list name (required)
    list[5]           description
    list[8]           place entries
    entry[1]          location sub-array
    entry[1][4]       address
    entry[1][5][2]    latitude
    entry[1][5][3]    longitude
    entry[2]          place name (entry dropped when missing)
    entry[3]          notes
"""
from dataclasses import dataclass
from typing import List, Optional

import structlog

from ..errors import RequiredFieldMissing
from ..jobs.models import GoogleMapsListData, ListMetadata, Place
from .tree import JArray, JNumber, JString, Node

log = structlog.get_logger()


@dataclass(frozen=True)
class PayloadLayout:
    version: str = 'placelist-v1'

    # list array
    share_block: int = 2
    share_url: int = 2
    creator_block: int = 3
    creator: int = 0
    list_name: int = 4
    list_description: int = 5
    places: int = 8

    # place entry
    location: int = 1
    place_name: int = 2
    place_notes: int = 3

    # location sub-array
    address: int = 4
    coordinates: int = 5

    # coordinate sub-array
    latitude: int = 2
    longitude: int = 3


LAYOUT = PayloadLayout()


def get_item(array: Optional[JArray], index: int) -> Optional[Node]:
    if array is None or index < 0 or index >= len(array.items):
        return None
    return array.items[index]


def get_array(array: Optional[JArray], index: int) -> Optional[JArray]:
    item = get_item(array, index)
    return item if isinstance(item, JArray) else None


def get_str(array: Optional[JArray], index: int) -> Optional[str]:
    item = get_item(array, index)
    return item.value if isinstance(item, JString) else None


def get_number(array: Optional[JArray], index: int) -> Optional[float]:
    item = get_item(array, index)
    return item.value if isinstance(item, JNumber) else None


def decode_place(entry: JArray, layout: PayloadLayout = LAYOUT) -> Optional[Place]:
    """
    Build one Place from a place entry, or None when the entry has no
    usable name. Partial entries still produce a Place.
    """
    name = get_str(entry, layout.place_name)
    if name is None or not name.strip():
        log.debug('decoder.place_dropped', reason='missing_name', length=len(entry.items))
        return None

    notes = get_str(entry, layout.place_notes)

    location = get_array(entry, layout.location)
    address = get_str(location, layout.address)
    if location is None:
        log.debug('decoder.place_without_location', place=name)

    latitude = longitude = None
    coordinates = get_array(location, layout.coordinates)
    lat = get_number(coordinates, layout.latitude)
    lng = get_number(coordinates, layout.longitude)
    if lat is not None and lng is not None:
        latitude, longitude = lat, lng
    else:
        log.debug('decoder.place_without_coordinates', place=name)

    return Place(
        name=name,
        address=address,
        notes=notes,
        latitude=latitude,
        longitude=longitude,
    )


def decode_places(entries: Optional[JArray], layout: PayloadLayout = LAYOUT) -> List[Place]:
    places = []
    if entries is None:
        log.debug('decoder.no_places_array')
        return places

    for entry in entries.items:
        if not isinstance(entry, JArray):
            log.debug('decoder.place_dropped', reason='not_an_array')
            continue
        place = decode_place(entry, layout)
        if place is not None:
            places.append(place)
    return places


def decode_list(matched: JArray, layout: PayloadLayout = LAYOUT) -> GoogleMapsListData:
    """Decode the matched list array into list metadata and places."""
    name = get_str(matched, layout.list_name)
    if name is None or not name.strip():
        raise RequiredFieldMissing('name')

    metadata = ListMetadata(
        name=name,
        description=get_str(matched, layout.list_description),
        creator=get_str(get_array(matched, layout.creator_block), layout.creator),
        share_url=get_str(get_array(matched, layout.share_block), layout.share_url),
    )
    places = decode_places(get_array(matched, layout.places), layout)

    log.debug('decoder.done',
              layout=layout.version,
              list_name=name,
              places=len(places))
    return GoogleMapsListData(metadata=metadata, places=tuple(places))
