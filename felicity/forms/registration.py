# LarpManager - https://larpmanager.com
# Copyright (C) 2025 Scanagatta Mauro
#
# This file is part of LarpManager and is dual-licensed:
#
# 1. Under the terms of the GNU Affero General Public License (AGPL) version 3,
#    as published by the Free Software Foundation. You may use, modify, and
#    distribute this file under those terms.
#
# 2. Under a commercial license, allowing use in closed-source or proprietary
#    environments without the obligations of the AGPL.
#
# If you have obtained this file under the AGPL, and you make it available over
# a network, you must also make the complete source code available under the same license.
#
# For more information or to purchase a commercial license, contact:
# commercial@larpmanager.com
#
# SPDX-License-Identifier: AGPL-3.0-or-later OR Proprietary

import json
import math
from typing import Any, Callable

from django import forms
from django.conf import settings as conf_settings

from felicity.models.accounting import PaymentMethod, PaymentStatus
from felicity.models.event import FieldType, FormField
from felicity.utils.exceptions import ValidationError
from felicity.utils.upload import StoredUpload


def read_answers(raw: Any) -> dict[str, Any]:
    """Return the answers map, accepting a dict or its JSON encoding (multipart bodies).

    Raises:
        ValidationError: If the payload is not a JSON object
    """
    if raw is None:
        return {}

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return {}
        try:
            raw = json.loads(raw)
        except ValueError as err:
            raise ValidationError("answers must be a valid JSON object") from err

    if not isinstance(raw, dict):
        raise ValidationError("answers must be a valid JSON object")

    return raw


def _is_missing(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _parse_text(field: FormField, raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValidationError(f"Field {field.key} must be a string")

    value = raw.strip()
    if not value and field.required:
        raise ValidationError(f"Missing required value for field {field.key}")
    return value


def _parse_select(field: FormField, raw: Any) -> str:
    value = _parse_text(field, raw)
    if field.options and value not in field.options:
        raise ValidationError(f"Invalid option for field {field.key}")
    return value


def _parse_number(field: FormField, raw: Any) -> int | float:
    # bool is an int subclass, but never a valid number answer
    if isinstance(raw, bool):
        raise ValidationError(f"Field {field.key} must be a valid number")

    if isinstance(raw, (int, float)):
        value = raw
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError as err:
            raise ValidationError(f"Field {field.key} must be a valid number") from err
    else:
        raise ValidationError(f"Field {field.key} must be a valid number")

    if not math.isfinite(value):
        raise ValidationError(f"Field {field.key} must be a valid number")

    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _parse_checkbox(field: FormField, raw: Any) -> list[str]:
    if isinstance(raw, list):
        selected = [str(item).strip() for item in raw]
    elif isinstance(raw, str):
        selected = [item.strip() for item in raw.split(",")]
    else:
        raise ValidationError(f"Field {field.key} must be a string or string[]")

    selected = [item for item in selected if item]
    if not selected and field.required:
        raise ValidationError(f"Missing required value for field {field.key}")

    options = field.options or []
    if any(item not in options for item in selected):
        raise ValidationError(f"Invalid option for field {field.key}")
    return selected


# Parser of each answered field type, files are matched against the uploads instead
FIELD_PARSERS: dict[str, Callable[[FormField, Any], Any]] = {
    FieldType.TEXT: _parse_text,
    FieldType.TEXTAREA: _parse_text,
    FieldType.SELECT: _parse_select,
    FieldType.NUMBER: _parse_number,
    FieldType.CHECKBOX: _parse_checkbox,
}


def _response(field: FormField, **kwargs) -> dict[str, Any]:
    return {"key": field.key, "label": field.label, "type": field.typ, **kwargs}


def _check_submitted_keys(fields_by_key: dict[str, FormField], answers: dict, file_map: dict) -> None:
    for answer_key in answers:
        field = fields_by_key.get(answer_key)
        if not field:
            raise ValidationError(f"Unknown form field: {answer_key}")
        if field.typ == FieldType.FILE:
            raise ValidationError(f"Field {answer_key} must be uploaded as file")

    for file_key in file_map:
        field = fields_by_key.get(file_key)
        if not field:
            raise ValidationError(f"Unknown file field: {file_key}")
        if field.typ != FieldType.FILE:
            raise ValidationError(f"Field {file_key} does not accept file uploads")


def validate_normal_responses(
    fields: list[FormField], answers: dict[str, Any], uploads: list[StoredUpload]
) -> list[dict[str, Any]]:
    """Validate a registration form submission against the event fields.

    The whole submission is rejected on the first violation, nothing is
    returned for partial answers.

    Args:
        fields: Form fields of the event
        answers: Submitted values keyed by field key
        uploads: Files received with the submission

    Returns:
        list[dict]: Stored responses in field order, optional missing fields omitted

    Raises:
        ValidationError: Naming the offending field
    """
    file_map = {}
    for upload in uploads:
        if upload.field in file_map:
            raise ValidationError("Only one file is allowed per file field")
        file_map[upload.field] = upload

    fields_by_key = {field.key: field for field in fields}
    _check_submitted_keys(fields_by_key, answers, file_map)

    responses = []
    for field in sorted(fields, key=lambda el: el.order):
        if field.typ == FieldType.FILE:
            upload = file_map.get(field.key)
            if not upload:
                if field.required:
                    raise ValidationError(f"Missing required file for field {field.key}")
                continue
            responses.append(_response(field, file=upload.as_response()))
            continue

        raw = answers.get(field.key)
        if _is_missing(raw):
            if field.required:
                raise ValidationError(f"Missing required value for field {field.key}")
            continue

        parser = FIELD_PARSERS[field.typ]
        responses.append(_response(field, value=parser(field, raw)))

    return responses


def first_form_error(form: forms.Form) -> str:
    """Return the first error of a bound form as a single message."""
    for field_name, errors in form.errors.items():
        return f"{field_name}: {errors[0]}"
    return "Invalid request"


class PaymentDetailsForm(forms.Form):
    paymentMethod = forms.ChoiceField(choices=PaymentMethod.choices, required=False)

    proofUrl = forms.CharField(max_length=500, required=False)

    def clean_paymentMethod(self):
        return self.cleaned_data.get("paymentMethod") or PaymentMethod.OTHER


class RegisterForm(PaymentDetailsForm):
    eventId = forms.CharField(max_length=64)


class PurchaseForm(PaymentDetailsForm):
    eventId = forms.CharField(max_length=64)

    sku = forms.CharField(max_length=80)

    quantity = forms.IntegerField(min_value=1, required=False)

    def clean_quantity(self):
        quantity = self.cleaned_data.get("quantity")
        if quantity is None:
            return 1
        if quantity > conf_settings.FELICITY_MAX_PURCHASE_QUANTITY:
            raise forms.ValidationError(
                f"Ensure this value is less than or equal to {conf_settings.FELICITY_MAX_PURCHASE_QUANTITY}."
            )
        return quantity


class PaymentDecisionForm(forms.Form):
    status = forms.ChoiceField(choices=[(PaymentStatus.APPROVED, "approved"), (PaymentStatus.REJECTED, "rejected")])


class TicketVerifyForm(forms.Form):
    ticketId = forms.CharField(max_length=40, required=False)

    qrPayload = forms.CharField()
