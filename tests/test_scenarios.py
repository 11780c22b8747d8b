from __future__ import annotations

import pytest
from selenium.common.exceptions import ElementClickInterceptedException

from shopcheck.core.exceptions import ResolutionTimeout, SignalTimeout
from shopcheck.core.runtime import build_runtime
from shopcheck.scenarios.storefront import run_scenario

ACCEPT_NAME = r"\b(accept( all)?|agree|close|dismiss|ok)\b"
LANDING_URL = "https://www.kerastase.ca/en/special-offers.html"
PRODUCT_URL = "https://www.kerastase.ca/en/collections/nutritive/8h-magic-night-hair-serum.html"


def add_landing_page(page):
    page.add("css", "h1", page.element("heading", text="Special Offers"))
    page.add("css", "nav", page.element("nav"))


def screenshot_names(runtime):
    return [path.name for path in runtime.page.screenshots]


def test_landing_page_scenario_passes(runtime, fake_page):
    add_landing_page(fake_page)
    fake_page.add("role", "button", fake_page.element("cookies"), name=ACCEPT_NAME)

    result = run_scenario("landing_page_loads", runtime)

    assert result.passed is True
    assert fake_page.navigations == [LANDING_URL]
    assert fake_page.clicks == ["cookies"]
    assert 'Main heading found: "Special Offers"' in result.narration
    assert screenshot_names(runtime) == ["landing-page-loaded.png"]
    assert result.artifacts[0].parent.name == "screenshots"


def test_landing_page_without_heading_fails_and_is_recorded(runtime, fake_page):
    with pytest.raises(ResolutionTimeout):
        run_scenario("landing_page_loads", runtime)

    records = runtime.audit_logger.read_results()
    assert records[-1]["scenario"] == "landing_page_loads"
    assert records[-1]["passed"] is False
    assert records[-1]["error_type"] == "ResolutionTimeout"


def test_failures_can_be_returned_instead_of_raised(runtime, fake_page):
    fake_page._title = ""

    result = run_scenario("landing_page_loads", runtime, raise_on_failure=False)

    assert result.passed is False
    assert result.error_type == "AssertionError"
    assert "Page title is empty" in result.error


def test_signup_scenario_accepts_confirmation_redirect(runtime, fake_page):
    add_landing_page(fake_page)
    fake_page.add("role", "button", fake_page.element("sign-up"), name="sign up")
    fake_page.add("placeholder", "email", fake_page.element("email"))

    def redirect():
        fake_page.current_url = "https://www.kerastase.ca/en/newsletter/confirmation"

    fake_page.add("role", "button", fake_page.element("subscribe", on_click=redirect), name="submit|subscribe|join")

    result = run_scenario("signup_form_submission", runtime)

    assert result.passed is True
    assert fake_page.clicks == ["sign-up", "subscribe"]
    assert fake_page.fills == [("email", "test-automation@example.com")]
    assert any(line.startswith("Redirected to confirmation page") for line in result.narration)
    assert screenshot_names(runtime) == ["signup-form-filled.png", "signup-success.png"]


def test_signup_scenario_accepts_success_message(runtime, fake_page):
    add_landing_page(fake_page)
    fake_page.add("role", "link", fake_page.element("sign-up-link"), name="sign up")
    fake_page.add("css", "input[type='email']", fake_page.element("email"))
    fake_page.add("css", "button[type='submit']", fake_page.element("submit"))
    fake_page.add(
        "text",
        "success|thank you|subscribed|welcome",
        fake_page.element("thanks", text="Thank you for subscribing", appears_at=5.0),
    )

    result = run_scenario("signup_form_submission", runtime)

    assert result.passed is True
    assert "Success message displayed" in result.narration


def test_signup_scenario_fails_when_no_signal_fires(runtime, fake_page):
    add_landing_page(fake_page)
    fake_page.add("role", "button", fake_page.element("sign-up"), name="sign up")
    fake_page.add("label", "email", fake_page.element("email"))
    fake_page.add("css", "button[type='submit']", fake_page.element("submit"))

    with pytest.raises(SignalTimeout):
        run_scenario("signup_form_submission", runtime)

    assert fake_page.clock.now >= 20


def test_add_to_cart_reports_badge_count(runtime, fake_page):
    badge = fake_page.element("badge", text="1", appears_at=10_000)

    def added():
        badge.appears_at = 0

    fake_page.add("role", "button", fake_page.element("add", on_click=added), name="add to cart|add to bag|buy now")
    fake_page.add("test_id", "cart-count", badge)

    result = run_scenario("add_to_cart", runtime)

    assert result.passed is True
    assert fake_page.navigations == [PRODUCT_URL]
    assert "Cart count updated: 1" in result.narration
    assert screenshot_names(runtime) == ["product-page-before-add.png", "product-added-to-cart.png"]


def test_add_to_cart_closes_modal_and_accepts_notification(runtime, fake_page):
    dialog = fake_page.element("upsell", appears_at=10_000)

    def added():
        dialog.appears_at = 0
        fake_page.add("text", "added to cart|item added", fake_page.element("toast", text="Item added"))

    fake_page.add("role", "button", fake_page.element("add", on_click=added), name="add to cart|add to bag|buy now")
    fake_page.add("role", "dialog", dialog)
    fake_page.add("role", "button", fake_page.element("dialog-close"), name="^close$", scope=dialog)

    result = run_scenario("add_to_cart", runtime)

    assert fake_page.clicks == ["add", "dialog-close"]
    assert "Closed post-add modal" in result.narration
    assert "Cart notification displayed" in result.narration


def test_add_to_cart_is_not_repeated_once_the_cart_changed(runtime, fake_page):
    badge = fake_page.element("badge", text="0")

    def added_but_blocked():
        badge.text = "1"
        raise ElementClickInterceptedException("promo overlay")

    fake_page.add("role", "button", fake_page.element("add", on_click=added_but_blocked), name="add to cart|add to bag|buy now")
    fake_page.add("css", ".cart-count", badge)

    result = run_scenario("add_to_cart", runtime)

    assert result.passed is True
    assert fake_page.clicks.count("add") == 1


def test_checkout_goes_through_cart_when_no_checkout_link(runtime, fake_page):
    fake_page.add("role", "button", fake_page.element("add"), name="add to cart|add to bag|buy now")
    fake_page.add("role", "link", fake_page.element("cart-checkout"), name="checkout|proceed")
    fake_page.add("text", "order summary|your order|cart summary", fake_page.element("summary"))
    fake_page.add("css", ".payment, #payment", fake_page.element("payment"))

    result = run_scenario("checkout_page", runtime)

    assert result.passed is True
    assert fake_page.navigations == [
        LANDING_URL,
        PRODUCT_URL,
        "https://www.kerastase.ca/cart",
    ]
    assert fake_page.clicks == ["add", "cart-checkout"]
    assert screenshot_names(runtime) == ["checkout-page.png"]


def test_checkout_uses_visible_checkout_button(runtime, fake_page):
    fake_page.add("role", "button", fake_page.element("shop-now"), name="add to cart|shop now|buy")
    fake_page.add("role", "button", fake_page.element("add"), name="add to cart|add to bag|buy now")
    fake_page.add("css", "a[href*='checkout']", fake_page.element("mini-cart-checkout"))
    fake_page.add("test_id", "order-summary", fake_page.element("summary"))
    fake_page.add("text", "payment|payment information|billing", fake_page.element("payment"))

    result = run_scenario("checkout_page", runtime)

    assert result.passed is True
    assert fake_page.navigations == [LANDING_URL]
    assert fake_page.clicks == ["add", "mini-cart-checkout"]


def test_mobile_scenario_checks_heading_width(runtime, fake_page):
    add_landing_page(fake_page)

    result = run_scenario("mobile_responsive", runtime)

    assert result.passed is True
    assert fake_page.viewport == (375, 667)
    assert "Heading fits within mobile viewport" in result.narration
    assert screenshot_names(runtime) == ["landing-page-mobile.png"]


def test_mobile_scenario_fails_for_overflowing_heading(runtime, fake_page):
    fake_page.add("css", "h1", fake_page.element("heading", text="Too wide", size=(640.0, 40.0)))
    fake_page.add("css", "nav", fake_page.element("nav"))

    with pytest.raises(AssertionError, match="wider than the 375px viewport"):
        run_scenario("mobile_responsive", runtime)


def test_run_log_is_written_per_scenario(runtime, fake_page):
    add_landing_page(fake_page)

    run_scenario("landing_page_loads", runtime)

    log_path = runtime.artifact_manager.run_log_root / "landing_page_loads-chrome-desktop.log"
    assert "Screenshot saved: landing-page-loaded.png" in log_path.read_text(encoding="utf-8")


def test_mobile_profile_runs_keep_their_own_artifacts(fake_page, suite_config, tmp_path):
    add_landing_page(fake_page)
    mobile = build_runtime(fake_page, suite_config, artifacts_root=tmp_path / "reports", device_profile="mobile")

    result = run_scenario("landing_page_loads", mobile)

    assert result.artifacts[0].parent.name == "mobile"
    assert result.artifacts[0].parent.parent.name == "screenshots"
    assert (mobile.artifact_manager.run_log_root / "landing_page_loads-chrome-mobile.log").exists()
    assert mobile.audit_logger.read_results()[-1]["device_profile"] == "mobile"
