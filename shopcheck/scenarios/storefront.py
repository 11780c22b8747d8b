from __future__ import annotations

import re
from typing import Callable

from selenium.common.exceptions import WebDriverException

from shopcheck.core.metadata import ScenarioResult
from shopcheck.core.runtime import StorefrontRuntime
from shopcheck.core.signals import SuccessSignal

SIGNUP_SUCCESS_TEXT = r"success|thank you|subscribed|welcome"
SIGNUP_CONFIRMATION_URL = r"confirmation|thank-you|success"


def landing_page_loads(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    _open(runtime, result, "landing")
    _assert_title(runtime, result)

    heading = runtime.resolver.find("page_heading")
    result.narrate(f'Main heading found: "{runtime.page.text_of(heading.require())}"')

    _capture(runtime, result, "landing-page-loaded.png")


def signup_form_submission(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    config = runtime.suite_config
    settings = config.scenario_settings("signup_form_submission")
    _open(runtime, result, "landing")

    signup = runtime.resolver.find("signup_button")
    signup.require()
    result.narrate("Sign Up button found")
    runtime.guard.click(signup)
    result.narrate("Clicked Sign Up button")
    runtime.page.pause(config.environment.settle_delay_seconds)

    email = runtime.resolver.find("email_input")
    email.require()
    runtime.guard.fill(email, config.test_data.email)
    result.narrate(f"Filled email: {config.test_data.email}")
    _capture(runtime, result, "signup-form-filled.png")

    runtime.guard.click("submit_button")
    result.narrate("Clicked submit button")

    outcome = runtime.signals.await_any(
        [
            SuccessSignal.text("success message", settings.get("success_text", SIGNUP_SUCCESS_TEXT)),
            SuccessSignal.url("confirmation redirect", settings.get("confirmation_url", SIGNUP_CONFIRMATION_URL)),
        ],
        timeout=float(settings.get("success_timeout_seconds", 20)),
    )
    if outcome.require().kind == "url":
        result.narrate(f"Redirected to confirmation page: {runtime.page.current_url}")
    else:
        result.narrate("Success message displayed")

    _capture(runtime, result, "signup-success.png")


def add_to_cart(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    _open(runtime, result, "product")

    button = runtime.resolver.find("add_to_cart_button")
    button.require()
    result.narrate("Add to Cart button found")
    _capture(runtime, result, "product-page-before-add.png")

    _add_product(runtime, result, button)

    badge_signal = SuccessSignal.element("cart count badge", "cart_badge")
    outcome = runtime.signals.await_any(
        [badge_signal, SuccessSignal.element("cart notification", "cart_notification")],
    )
    if outcome.require() is badge_signal:
        result.narrate(f"Cart count updated: {runtime.page.text_of(outcome.element)}")
    else:
        result.narrate("Cart notification displayed")

    _capture(runtime, result, "product-added-to-cart.png")


def checkout_page(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    config = runtime.suite_config
    environment = config.environment
    settings = config.scenario_settings("checkout_page")
    _open(runtime, result, "landing")

    if not runtime.resolver.probe("landing_add_to_cart_button").found:
        _navigate(runtime, "product")
        result.narrate("Navigated to product page")

    button = runtime.resolver.find("add_to_cart_button")
    button.require()
    _add_product(runtime, result, button)
    runtime.page.pause(float(settings.get("cart_update_delay_seconds", 2)))

    checkout = runtime.resolver.probe("checkout_button")
    if not checkout.found:
        _navigate(runtime, "cart")
        result.narrate("Navigated to cart page")
        runtime.page.pause(environment.settle_delay_seconds)
        checkout = runtime.resolver.find("cart_checkout_button", timeout=float(settings.get("checkout_button_timeout_seconds", 5)))
        checkout.require()
    runtime.guard.click(checkout)
    result.narrate("Clicked checkout button")

    runtime.page.wait_for_load_state("domcontentloaded", environment.navigation_timeout_seconds)
    runtime.resolver.find("order_summary", timeout=float(settings.get("summary_timeout_seconds", 20))).require()
    result.narrate("Order summary section found")
    runtime.resolver.find("payment_section").require()
    result.narrate("Payment information section found")

    _capture(runtime, result, "checkout-page.png")


def mobile_responsive(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    settings = runtime.suite_config.scenario_settings("mobile_responsive")
    viewport = runtime.suite_config.environment.viewport("mobile")
    runtime.page.set_viewport(viewport.width, viewport.height)
    result.narrate(f"Viewport set to mobile size: {viewport.width}x{viewport.height}")

    _open(runtime, result, "landing")
    _assert_title(runtime, result)

    timeout = float(settings.get("element_timeout_seconds", 5))
    heading = runtime.resolver.find("page_heading", timeout=timeout).require()
    result.narrate(f'Main heading visible on mobile: "{runtime.page.text_of(heading)}"')

    box = runtime.page.bounding_box(heading)
    if box:
        assert box["width"] <= viewport.width, (
            f"Heading is {box['width']:.0f}px wide, wider than the {viewport.width}px viewport"
        )
        result.narrate("Heading fits within mobile viewport")

    runtime.resolver.find("navigation_menu", timeout=timeout).require()
    result.narrate("Navigation menu found on mobile")

    _capture(runtime, result, "landing-page-mobile.png")


SCENARIOS: dict[str, Callable[[StorefrontRuntime, ScenarioResult], None]] = {
    "landing_page_loads": landing_page_loads,
    "signup_form_submission": signup_form_submission,
    "add_to_cart": add_to_cart,
    "checkout_page": checkout_page,
    "mobile_responsive": mobile_responsive,
}


def run_scenario(name: str, runtime: StorefrontRuntime, raise_on_failure: bool = True) -> ScenarioResult:
    """Runs one scenario, records its result and re-raises any failure by default."""

    scenario = SCENARIOS[name]
    result = ScenarioResult(name=name, browser=runtime.browser_name, device_profile=runtime.device_profile)
    try:
        scenario(runtime, result)
    except Exception as exc:  # noqa: BLE001 - the audit record needs the concrete failure.
        result.narrate(f"Failed: {type(exc).__name__}: {exc}")
        _record(runtime, result.finish(False, exc))
        if raise_on_failure:
            raise
        return result
    _record(runtime, result.finish(True))
    return result


def _record(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    runtime.audit_logger.write(result)
    runtime.artifact_manager.write_run_log(f"{result.name}-{result.browser}-{result.device_profile}", result.narration)


def _navigate(runtime: StorefrontRuntime, page_name: str) -> str:
    environment = runtime.suite_config.environment
    url = runtime.suite_config.url(page_name)
    runtime.page.navigate(url, wait_until=environment.wait_until, timeout=environment.navigation_timeout_seconds)
    runtime.overlays.dismiss_if_present()
    return url


def _open(runtime: StorefrontRuntime, result: ScenarioResult, page_name: str) -> None:
    url = _navigate(runtime, page_name)
    result.narrate(f"Navigated to {page_name} page: {url}")


def _assert_title(runtime: StorefrontRuntime, result: ScenarioResult) -> None:
    title = runtime.page.title()
    assert title, "Page title is empty"
    result.narrate(f'Page title: "{title}"')


def _add_product(runtime: StorefrontRuntime, result: ScenarioResult, button) -> None:
    before = _cart_count(runtime)
    runtime.guard.click(button, settled=lambda: _cart_changed(runtime, before))
    result.narrate("Clicked Add to Cart button")
    runtime.page.pause(runtime.suite_config.environment.settle_delay_seconds)
    if runtime.overlays.close_modal_if_present():
        result.narrate("Closed post-add modal")


def _cart_count(runtime: StorefrontRuntime) -> int | None:
    badge = runtime.resolver.probe("cart_badge")
    if not badge.found:
        return None
    try:
        digits = re.search(r"\d+", runtime.page.text_of(badge.element))
    except WebDriverException:
        return None
    return int(digits.group()) if digits else None


def _cart_changed(runtime: StorefrontRuntime, before: int | None) -> bool:
    after = _cart_count(runtime)
    if after is not None and after != before:
        return True
    return runtime.resolver.probe("cart_notification").found


def _capture(runtime: StorefrontRuntime, result: ScenarioResult, filename: str) -> None:
    target = runtime.artifact_manager.screenshot_path(filename, runtime.device_profile)
    path = runtime.page.screenshot(target, full_page=True)
    result.add_artifact(path)
    result.narrate(f"Screenshot saved: {filename}")
