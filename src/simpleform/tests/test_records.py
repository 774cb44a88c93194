"""Tests for forms built from Pydantic models and dataclasses."""

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from simpleform import FormBuilder, simple_form_for

from .conftest import Account, Project


# =============================================================================
# Test Pydantic Records
# =============================================================================


@pytest.mark.browser
class TestPydanticRecords:
    """Tests for inputs inferred from Pydantic model fields."""

    def test_should_render_string_fields_with_max_length(self, account, render_page):
        """str fields are text inputs carrying their max length."""
        # Act
        page = render_page(FormBuilder(account).input("username"))
        input_element = page.locator("div.string.required input#account_username.string")

        # Assert
        assert input_element.get_attribute("maxlength") == "30"
        assert input_element.get_attribute("value") == "ada"

    def test_should_render_text_marker_as_textarea(self, account, render_page):
        """The Text marker asks for a textarea."""
        # Act
        page = render_page(FormBuilder(account).input("bio"))

        # Assert
        assert page.locator("textarea#account_bio.text.optional").get_attribute("name") == "account[bio]"

    def test_should_never_render_secret_values(self, account, render_page):
        """SecretStr fields are password inputs without value."""
        # Act
        page = render_page(FormBuilder(account).input("password"))

        # Assert
        assert page.locator("input#account_password.password").get_attribute("type") == "password"
        assert page.locator("input[value]").count() == 0

    def test_should_render_enum_fields_as_selects(self, account, render_page):
        """Enum fields list their members with the current one selected."""
        # Act
        page = render_page(FormBuilder(account).input("plan"))

        # Assert
        assert page.locator("select#account_plan.select.optional").count() == 1
        assert page.locator("option[value=free]").text_content() == "Free"
        assert page.locator("option[value=pro_monthly][selected]").text_content() == "Pro monthly"

    def test_should_render_literal_fields_as_radios_on_demand(self, account, render_page):
        """Literal fields accept the 'as' option like any select."""
        # Act
        page = render_page(FormBuilder(account).input("theme", **{"as": "radio"}))

        # Assert
        assert page.locator("input.radio[type=radio]").count() == 2
        assert page.locator("input#account_theme_light.radio[checked]").get_attribute("value") == "light"
        assert page.locator("input#account_theme_dark.radio").count() == 1

    def test_should_render_numeric_constraints(self, account, render_page):
        """ge/le/multiple_of become min/max/step."""
        # Act
        page = render_page(FormBuilder(account).input("score") + FormBuilder(account).input("balance"))
        score = page.locator("input#account_score.integer[type=number]")
        balance = page.locator("input#account_balance.decimal")

        # Assert
        assert score.get_attribute("min") == "0"
        assert score.get_attribute("max") == "100"
        assert score.get_attribute("step") == "5"
        assert balance.get_attribute("step") == "any"
        assert balance.get_attribute("min") == "0"

    def test_should_drop_numeric_constraints_for_string_overrides(self, account, render_page):
        """min/max/step do not follow a number rendered as a text input."""
        # Act
        page = render_page(FormBuilder(account).input("score", **{"as": "string"}))
        input_element = page.locator("input#account_score.string")

        # Assert
        assert input_element.get_attribute("type") == "text"
        assert input_element.get_attribute("min") is None
        assert input_element.get_attribute("max") is None
        assert input_element.get_attribute("step") is None

    @pytest.mark.parametrize(
        ("attribute", "selector", "input_type"),
        [
            ("newsletter", "input#account_newsletter.boolean", "checkbox"),
            ("email", "input#account_email.email", "email"),
            ("website", "input#account_website.url", "url"),
            ("ratio", "input#account_ratio.float", "number"),
            ("birthday", "input#account_birthday.date", "date"),
            ("last_login", "input#account_last_login.datetime", "datetime-local"),
            ("wake_up", "input#account_wake_up.time", "time"),
        ],
    )
    def test_should_render_each_field_type(self, account, render_page, attribute, selector, input_type):
        """Each annotation renders its HTML input."""
        # Act
        page = render_page(FormBuilder(account).input(attribute))

        # Assert
        assert page.locator(selector).get_attribute("type") == input_type

    def test_should_label_with_field_title(self, account, render_page):
        """Field titles are used as labels."""
        # Act
        page = render_page(FormBuilder(account).input("nickname"))

        # Assert
        assert page.locator("label.string.optional[for=account_nickname]").inner_text() == "Screen name"

    def test_should_render_pydantic_validation_errors(self, render_page):
        """Pydantic ValidationErrors are shown on their fields."""
        # Arrange
        with pytest.raises(PydanticValidationError) as exc_info:
            Account.model_validate({"score": 105})
        account = Account.model_construct(username="", score=105)

        # Act
        page = render_page(
            simple_form_for(
                account,
                lambda f: [f.input("username"), f.input("score")],
                errors=exc_info.value,
            )
        )

        # Assert
        assert page.locator("div.string.field_with_errors span.error").inner_text() == "can't be blank"
        assert page.locator("div.integer span.error").inner_text() == "must be less than or equal to 100"

    def test_should_create_update_buttons_for_records_with_id(self, account, render_page):
        """Records with an id are updated."""
        # Act
        page = render_page(simple_form_for(account, lambda f: f.button("submit")))

        # Assert
        assert page.locator("form#edit_account_7.simple_form.account input.update").get_attribute("value") == (
            "Update Account"
        )


# =============================================================================
# Test Dataclass Records
# =============================================================================


@pytest.mark.browser
class TestDataclassRecords:
    """Tests for inputs inferred from dataclass fields."""

    def test_should_render_a_project_form(self, render_page):
        """Dataclass fields are rendered from their type hints."""
        # Arrange
        project = Project(name="Apollo", budget=Decimal("12.5"))

        # Act
        page = render_page(
            simple_form_for(
                project,
                lambda f: [
                    f.input("name"),
                    f.input("summary"),
                    f.input("budget"),
                    f.input("deadline"),
                    f.button("submit"),
                ],
            )
        )

        # Assert
        assert page.locator("form#new_project.simple_form.project").count() == 1
        assert page.locator("div.string.required input#project_name").get_attribute("value") == "Apollo"
        assert page.locator("div.text.optional textarea#project_summary").count() == 1
        assert page.locator("input#project_budget.decimal").get_attribute("value") == "12.5"
        assert page.locator("input#project_deadline.date").get_attribute("type") == "date"
        assert "Budget" in page.locator("label[for=project_budget]").inner_text()
        assert page.locator("input.create[type=submit]").get_attribute("value") == "Create Project"
