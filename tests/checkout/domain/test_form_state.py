"""Tests for touched/error bookkeeping of a single form."""

from checkout.payment.methods import switch_method
from checkout.validation.form import FormState


class TestBlurAndChange:
    def test_untouched_field_is_not_validated_on_change(self):
        form = FormState()
        form.change("email", "not-an-email")
        assert form.errors == {}

    def test_blur_validates(self):
        form = FormState()
        form.change("email", "not-an-email")
        form.blur("email")
        assert form.errors == {"email": "Please enter a valid email address"}
        assert not form.is_valid

    def test_touched_field_clears_error_once_valid(self):
        form = FormState()
        form.change("email", "bad")
        form.blur("email")
        form.change("email", "asha@example.com")
        assert "email" not in form.errors

    def test_cross_field_rule_sees_siblings(self):
        form = FormState()
        form.change("password", "Str0ng!Pass")
        form.change("confirm_password", "Str0ng!Pas")
        form.blur("confirm_password")
        assert form.errors["confirm_password"] == "Passwords do not match"


class TestSubmit:
    def test_submit_touches_and_reports_every_field(self):
        form = FormState(values={"first_name": "Asha"})
        assert form.submit(["first_name", "email"]) is False
        assert form.touched == {"first_name", "email"}
        assert form.errors == {"email": "Email is required"}

    def test_submit_valid_form(self):
        form = FormState(values={"first_name": "Asha", "email": "asha@example.com"})
        assert form.submit(["first_name", "email"]) is True
        assert form.is_valid


class TestReset:
    def test_reset_only_named_fields(self):
        form = FormState(values={"upi_id": "bad", "email": "bad"})
        form.submit(["upi_id", "email"])
        form.reset(["upi_id"])
        assert "upi_id" not in form.values
        assert "upi_id" not in form.errors
        assert form.errors["email"] == "Please enter a valid email address"

    def test_switching_method_discards_previous_method_fields(self):
        form = FormState(values={"method": "upi", "upi_id": "bad", "email": "asha@example.com"})
        form.submit(["upi_id"])

        switch_method(form, previous="upi", selected="card")

        assert form.values == {"method": "card", "email": "asha@example.com"}
        assert form.errors == {}
