from leadloop.services import templates
from leadloop.services.templates import render, choose_template


def test_double_brace_placeholders():
    assert render("Hi {{name}}!", {"name": "Sam"}) == "Hi Sam!"
    assert render("Hi {{ name }}!", {"name": "Sam"}) == "Hi Sam!"


def test_legacy_single_brace_placeholders():
    body = render(
        "Hey {name}, thanks for contacting {business}. You can book here: {booking}",
        {"name": "Jo", "business_name": "Acme", "booking_link": "https://acme.example/book"},
    )
    assert body == "Hey Jo, thanks for contacting Acme. You can book here: https://acme.example/book"


def test_missing_common_field_renders_empty():
    assert render("Hi {{name}}", {}) == "Hi "
    assert render("Book: {{booking_link}}", {"booking_link": None}) == "Book: "


def test_unknown_placeholder_left_as_is():
    assert render("Hi {{name}}, code {{promo}}", {"name": "Sam"}) == "Hi Sam, code {{promo}}"
    assert render("Use {coupon}", {}) == "Use {coupon}"


def test_extra_fields_resolve_when_supplied():
    assert render("Code {{promo}}", {"promo": "SAVE10"}) == "Code SAVE10"


def test_alias_resolves_either_direction():
    assert render("{{business_name}}", {"business": "Acme"}) == "Acme"
    assert render("{business}", {"business_name": "Acme"}) == "Acme"


def test_every_occurrence_is_replaced():
    assert render("{{name}} {{name}}", {"name": "Al"}) == "Al Al"


def test_client_template_wins_over_default():
    template = choose_template("Hi {{name}}!", "Hello {{name}}!")
    assert render(template, {"name": "Sam"}) == "Hi Sam!"


def test_blank_client_template_falls_back_to_default():
    assert choose_template("", "default") == "default"
    assert choose_template("   ", "default") == "default"
    assert choose_template(None, "default") == "default"


def test_default_review_request_renders_fully():
    body = render(templates.DEFAULT_REVIEW_REQUEST, {
        "name": "Sam", "business_name": "Acme", "review_link": "https://g.page/acme",
    })
    assert "{" not in body
    assert "Sam" in body and "Acme" in body and "https://g.page/acme" in body
