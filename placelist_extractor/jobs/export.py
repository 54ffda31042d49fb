# jobs/export.py
import csv
import os
import xml.etree.ElementTree as ET

import structlog

from .models import GoogleMapsListData, Place

log = structlog.get_logger()

KML_NS = 'http://www.opengis.net/kml/2.2'

CSV_FIELDS = ['name', 'address', 'notes', 'latitude', 'longitude']

ET.register_namespace('', KML_NS)


def _kml(tag: str) -> str:
    return f'{{{KML_NS}}}{tag}'


def _ensure_parent(path: str):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _format_coordinate(value: float) -> str:
    # repr keeps the shortest round-trip form
    return repr(float(value))


def place_description(place: Place) -> str:
    parts = [p for p in (place.address, place.notes) if p and p.strip()]
    return '\n\n'.join(parts)


def build_kml(data: GoogleMapsListData) -> ET.ElementTree:
    root = ET.Element(_kml('kml'))
    document = ET.SubElement(root, _kml('Document'))

    ET.SubElement(document, _kml('name')).text = data.name
    if data.description and data.description.strip():
        ET.SubElement(document, _kml('description')).text = data.description

    for place in data.places:
        placemark = ET.SubElement(document, _kml('Placemark'))
        ET.SubElement(placemark, _kml('name')).text = place.name

        description = place_description(place)
        if description:
            ET.SubElement(placemark, _kml('description')).text = description

        if place.has_coordinates:
            point = ET.SubElement(placemark, _kml('Point'))
            ET.SubElement(point, _kml('coordinates')).text = (
                f'{_format_coordinate(place.longitude)},'
                f'{_format_coordinate(place.latitude)},0'
            )

    tree = ET.ElementTree(root)
    ET.indent(tree)
    return tree


def write_kml(data: GoogleMapsListData, path: str) -> str:
    """Write the list as a KML document, one Placemark per place."""
    if not path or not path.strip():
        raise ValueError('Output path must be provided.')

    log.debug('export.kml_start', path=path)
    _ensure_parent(path)
    build_kml(data).write(path, encoding='utf-8', xml_declaration=True)
    log.debug('export.kml_done', path=path, placemarks=len(data.places))
    return path


def write_csv(data: GoogleMapsListData, path: str) -> str:
    if not path or not path.strip():
        raise ValueError('Output path must be provided.')

    _ensure_parent(path)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for place in data.places:
            writer.writerow({
                'name': place.name,
                'address': place.address or '',
                'notes': place.notes or '',
                'latitude': '' if place.latitude is None else _format_coordinate(place.latitude),
                'longitude': '' if place.longitude is None else _format_coordinate(place.longitude),
            })

    log.debug('export.csv_done', path=path, rows=len(data.places))
    return path
