"""Jinja2 rendering for notification bodies.

HTML templates are autoescaped; ``.txt`` templates (WhatsApp copy) are not.
"""

from datetime import datetime
from functools import lru_cache
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from ordering.config import get_settings

DELIVERY_LABELS = {
    "collection": "Collection",
    "delivery": "Home Delivery",
    "uber": "Uber Delivery",
}

PREPARATION_NOTES = {
    "collection": "Ready for collection in 30-45 minutes",
    "delivery": "Deliver in 45-60 minutes",
    "uber": "Prepare for Uber pickup",
}


def order_time(value: datetime) -> str:
    """Format a timestamp like ``Friday, 16 October 2026 at 18:42``."""
    return value.strftime("%A, %d %B %Y at %H:%M")


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Get the shared template environment."""
    env = Environment(
        loader=PackageLoader("ordering", "templates"),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["order_time"] = order_time
    return env


def render(template_name: str, **context: Any) -> str:
    """Render a template with brand settings available to every template."""
    settings = get_settings()
    base_context = {
        "brand_name": settings.brand_name,
        "restaurant_email": settings.restaurant_email,
        "restaurant_phone": settings.restaurant_phone,
        "delivery_labels": DELIVERY_LABELS,
        "preparation_notes": PREPARATION_NOTES,
    }
    return get_environment().get_template(template_name).render(**base_context, **context)
