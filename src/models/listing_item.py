# src/models/listing_item.py

"""Listing item models for inter-module data flow."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RawItem:
    """A listing card as read from the page, price still unparsed."""

    link: str
    title: str
    raw_price: str


@dataclass(frozen=True)
class NormalizedItem:
    """A listing card with its price as whole currency units."""

    link: str
    title: str
    price: int
