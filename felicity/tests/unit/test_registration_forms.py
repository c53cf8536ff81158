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

import pytest

from felicity.forms.registration import PurchaseForm, RegisterForm, read_answers, validate_normal_responses
from felicity.models.event import FieldType, FormField
from felicity.utils.exceptions import ValidationError
from felicity.utils.upload import StoredUpload


def field(key, typ=FieldType.TEXT, required=False, options=None, order=0):
    return FormField(key=key, label=key.capitalize(), typ=typ, required=required, options=options, order=order)


def upload(field_key, name="cv.pdf"):
    return StoredUpload(field_key, f"participations/1700000000000-abc{name[-4:]}", name, "application/pdf", 1234)


class TestReadAnswers:
    """Test decoding of the answers payload"""

    def test_dict_is_returned_as_is(self):
        assert read_answers({"name": "Ada"}) == {"name": "Ada"}

    def test_json_string_from_multipart(self):
        assert read_answers('{"name": "Ada", "age": 20}') == {"name": "Ada", "age": 20}

    def test_missing_answers(self):
        assert read_answers(None) == {}
        assert read_answers("  ") == {}

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", 42])
    def test_invalid_answers(self, raw):
        with pytest.raises(ValidationError) as exc:
            read_answers(raw)
        assert exc.value.message == "answers must be a valid JSON object"


class TestValidateNormalResponses:
    """Test validation of a registration form submission"""

    def test_select_outside_options_names_the_field(self):
        fields = [field("track", FieldType.SELECT, required=True, options=["A", "B"])]

        with pytest.raises(ValidationError) as exc:
            validate_normal_responses(fields, {"track": "C"}, [])

        assert exc.value.status_code == 400
        assert exc.value.message == "Invalid option for field track"

    def test_valid_submission_in_field_order(self):
        fields = [
            field("age", FieldType.NUMBER, order=2),
            field("name", FieldType.TEXT, required=True, order=0),
            field("track", FieldType.SELECT, options=["A", "B"], order=1),
            field("tools", FieldType.CHECKBOX, options=["git", "vim", "emacs"], order=3),
        ]
        answers = {"name": "  Ada ", "track": "B", "age": "21", "tools": ["git", "vim"]}

        responses = validate_normal_responses(fields, answers, [])

        assert [response["key"] for response in responses] == ["name", "track", "age", "tools"]
        assert responses[0] == {"key": "name", "label": "Name", "type": FieldType.TEXT, "value": "Ada"}
        assert responses[2]["value"] == 21
        assert responses[3]["value"] == ["git", "vim"]

    def test_optional_missing_fields_are_omitted(self):
        fields = [field("name", required=True), field("bio", FieldType.TEXTAREA)]

        responses = validate_normal_responses(fields, {"name": "Ada", "bio": "   "}, [])

        assert [response["key"] for response in responses] == ["name"]

    def test_missing_required_value(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("name", required=True)], {}, [])
        assert exc.value.message == "Missing required value for field name"

    def test_unknown_answer_key(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("name")], {"nickname": "Ada"}, [])
        assert exc.value.message == "Unknown form field: nickname"

    def test_text_must_be_a_string(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("name")], {"name": 12}, [])
        assert exc.value.message == "Field name must be a string"

    @pytest.mark.parametrize("raw", ["abc", True, "nan", "inf", [1]])
    def test_invalid_numbers(self, raw):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("age", FieldType.NUMBER)], {"age": raw}, [])
        assert exc.value.message == "Field age must be a valid number"

    def test_decimal_numbers_are_kept(self):
        responses = validate_normal_responses([field("score", FieldType.NUMBER)], {"score": "7.5"}, [])
        assert responses[0]["value"] == 7.5

    def test_checkbox_accepts_comma_separated_string(self):
        fields = [field("tools", FieldType.CHECKBOX, options=["git", "vim"])]

        responses = validate_normal_responses(fields, {"tools": "git, vim,"}, [])

        assert responses[0]["value"] == ["git", "vim"]

    def test_checkbox_invalid_option(self):
        fields = [field("tools", FieldType.CHECKBOX, options=["git", "vim"])]

        with pytest.raises(ValidationError) as exc:
            validate_normal_responses(fields, {"tools": ["git", "nano"]}, [])
        assert exc.value.message == "Invalid option for field tools"

    def test_required_checkbox_needs_a_selection(self):
        fields = [field("tools", FieldType.CHECKBOX, required=True, options=["git"])]

        with pytest.raises(ValidationError) as exc:
            validate_normal_responses(fields, {"tools": []}, [])
        assert exc.value.message == "Missing required value for field tools"

    def test_checkbox_wrong_type(self):
        fields = [field("tools", FieldType.CHECKBOX, options=["git"])]

        with pytest.raises(ValidationError) as exc:
            validate_normal_responses(fields, {"tools": 3}, [])
        assert exc.value.message == "Field tools must be a string or string[]"

    def test_file_field_response(self):
        fields = [field("cv", FieldType.FILE, required=True)]

        responses = validate_normal_responses(fields, {}, [upload("cv")])

        assert responses[0]["key"] == "cv"
        assert responses[0]["file"] == {
            "filename": "1700000000000-abc.pdf",
            "originalName": "cv.pdf",
            "mimeType": "application/pdf",
            "size": 1234,
        }

    def test_missing_required_file(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("cv", FieldType.FILE, required=True)], {}, [])
        assert exc.value.message == "Missing required file for field cv"

    def test_file_field_cannot_be_answered_with_text(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("cv", FieldType.FILE)], {"cv": "cv.pdf"}, [])
        assert exc.value.message == "Field cv must be uploaded as file"

    def test_upload_for_unknown_field(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("name")], {}, [upload("photo")])
        assert exc.value.message == "Unknown file field: photo"

    def test_upload_for_non_file_field(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("name")], {}, [upload("name")])
        assert exc.value.message == "Field name does not accept file uploads"

    def test_one_file_per_field(self):
        with pytest.raises(ValidationError) as exc:
            validate_normal_responses([field("cv", FieldType.FILE)], {}, [upload("cv"), upload("cv")])
        assert exc.value.message == "Only one file is allowed per file field"


class TestRequestForms:
    """Test the request body forms"""

    def test_register_form_defaults_payment_method(self):
        form = RegisterForm({"eventId": "abc123"})
        assert form.is_valid()
        assert form.cleaned_data["paymentMethod"] == "other"

    def test_register_form_rejects_unknown_method(self):
        form = RegisterForm({"eventId": "abc123", "paymentMethod": "bitcoin"})
        assert not form.is_valid()
        assert "paymentMethod" in form.errors

    def test_purchase_form_default_quantity(self):
        form = PurchaseForm({"eventId": "abc123", "sku": "TEE-M"})
        assert form.is_valid()
        assert form.cleaned_data["quantity"] == 1

    @pytest.mark.parametrize("quantity", [0, -2, 1000])
    def test_purchase_form_quantity_bounds(self, quantity):
        form = PurchaseForm({"eventId": "abc123", "sku": "TEE-M", "quantity": quantity})
        assert not form.is_valid()
        assert "quantity" in form.errors
