"""Shared ORM helpers.

Provides a TimestampMixin with created_at/updated_at fields and a KSUID
(K-Sortable Unique IDentifier) generator used for public identifiers."""

from tortoise import fields, models
from ksuid import ksuid


def generate_ksuid():
    """Generate a K-Sortable Unique IDentifier (KSUID).

    Returns:
        str: A 27 character, time-ordered, URL-safe identifier.
    """
    return str(ksuid.Ksuid())


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
