"""
Line-item validation and construction.

Fields are checked in a fixed order (start date, description, quantity, unit
price) and the first failure is returned as a typed reason. Nothing is built
unless every field is valid.
"""
import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from src.invoicing.ids import IdProvider, uuid4_ids
from src.invoicing.models import Service
from src.invoicing.results import Err, Ok, Result

log = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"\d+[.,]?\d*", re.ASCII)


class ServiceError(str, Enum):
    """Why a line item was rejected. The value names the offending field."""
    START_DATE_MISSING = "start_date"
    DESCRIPTION_MISSING = "description"
    INVALID_QUANTITY = "quantity"
    INVALID_UNIT_PRICE = "unit_price"


def parse_positive_number(text: Optional[str]) -> Optional[Decimal]:
    """Parse '12', '12.5' or '12,5' into a Decimal; None when invalid or zero."""
    if text is None or not NUMBER_PATTERN.fullmatch(text):
        return None
    try:
        value = Decimal(text.replace(",", "."))
    except InvalidOperation:
        return None
    if value <= 0:
        return None
    return value


def create_service(
    start_date: Optional[date],
    end_date: Optional[date],
    description: Optional[str],
    quantity: Optional[str],
    unit_price: Optional[str],
    ids: IdProvider = uuid4_ids,
) -> Result[Service, ServiceError]:
    """Validate raw line-item input and build a Service with derived amounts."""
    if start_date is None:
        return Err(ServiceError.START_DATE_MISSING)
    title = (description or "").strip()
    if not title:
        return Err(ServiceError.DESCRIPTION_MISSING)
    qty = parse_positive_number(quantity)
    if qty is None:
        return Err(ServiceError.INVALID_QUANTITY)
    price = parse_positive_number(unit_price)
    if price is None:
        return Err(ServiceError.INVALID_UNIT_PRICE)

    service = Service(
        id=ids(),
        date_from=start_date,
        date_to=end_date,
        title=title,
        quantity=qty,
        unit_price=price,
    )
    log.debug("Created service %s (%s x %s)", service.id, qty, price)
    return Ok(service)
