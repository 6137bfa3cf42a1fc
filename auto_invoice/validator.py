# auto_invoice/validator.py
from __future__ import annotations

from typing import Any, List, Mapping

from pydantic import ValidationError

from .errors import ConfigurationError
from .models import InvoiceConfig


def _is_list(val: Any) -> bool:
    return isinstance(val, list)


def _is_number(val: Any) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def _check_company(config: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []
    company = config.get("company")
    if not isinstance(company, Mapping):
        company = {}

    if not company.get("name"):
        errors.append("config.company.name is required")
    if not _is_list(company.get("details")):
        errors.append("config.company.details must be an array")
    return errors


def _check_services(prefix: str, services: Any) -> List[str]:
    errors: List[str] = []
    if not _is_list(services):
        return errors

    for index, service in enumerate(services):
        service_prefix = f"{prefix}.services[{index}]"
        if not isinstance(service, Mapping):
            service = {}
        if not service.get("description"):
            errors.append(f"{service_prefix}.description is required")
        for field in ("quantity", "unit_price", "tax_rate"):
            if not _is_number(service.get(field)):
                errors.append(f"{service_prefix}.{field} must be a number")
    return errors


def _check_client(index: int, client: Any) -> List[str]:
    errors: List[str] = []
    prefix = f"config.clients[{index}]"
    if not isinstance(client, Mapping):
        client = {}

    if not client.get("name"):
        errors.append(f"{prefix}.name is required")
    if not _is_list(client.get("details")):
        errors.append(f"{prefix}.details must be an array")

    email_to = client.get("email_to")
    if not _is_list(email_to) or len(email_to) == 0:
        errors.append(f"{prefix}.email_to must be a non-empty array")
    if not _is_list(client.get("email_cc")):
        errors.append(f"{prefix}.email_cc must be an array")
    if not _is_list(client.get("payment_details")):
        errors.append(f"{prefix}.payment_details must be an array")
    if not _is_list(client.get("services")):
        errors.append(f"{prefix}.services must be an array")

    errors.extend(_check_services(prefix, client.get("services")))
    return errors


def validate_config(config: Mapping[str, Any]) -> List[str]:
    """Return every structural problem found in ``config``, in check order.

    An empty list means the configuration can be turned into an
    :class:`InvoiceConfig`. Nothing is mutated.
    """
    if not isinstance(config, Mapping):
        return ["config must be an object"]

    errors: List[str] = []
    errors.extend(_check_company(config))

    clients = config.get("clients")
    if not _is_list(clients) or len(clients) == 0:
        errors.append("config.clients must be a non-empty array")
        return errors

    for index, client in enumerate(clients):
        errors.extend(_check_client(index, client))

    return errors


def parse_config(config: Mapping[str, Any]) -> InvoiceConfig:
    """Validate ``config`` and build the typed model, or raise ConfigurationError."""
    errors = validate_config(config)
    if errors:
        raise ConfigurationError(errors)
    try:
        return InvoiceConfig.model_validate(dict(config))
    except ValidationError as e:
        # element-level type problems the structural checks do not cover
        raise ConfigurationError(
            [
                "config." + ".".join(str(p) for p in err["loc"]) + f": {err['msg']}"
                for err in e.errors()
            ]
        ) from e
