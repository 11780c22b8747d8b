from __future__ import annotations

import logging

from selenium.common.exceptions import WebDriverException

from shopcheck.core.finder import ElementResolver
from shopcheck.core.metadata import Resolution

log = logging.getLogger(__name__)

COOKIE_ACCEPT_KEY = "cookie_accept"
MODAL_DIALOG_KEY = "modal_dialog"
MODAL_CLOSE_KEY = "modal_close"


class TransientOverlayHandler:
    """Best-effort dismissal of cookie banners and post-action modals.

    Nothing here raises: an overlay that is missing, or that refuses the click,
    is logged and left alone.
    """

    def __init__(self, page, resolver: ElementResolver) -> None:
        self.page = page
        self.resolver = resolver
        environment = resolver.suite_config.environment
        self.timeout = environment.overlay_timeout_seconds

    def dismiss_if_present(self) -> bool:
        try:
            control = self.resolver.find(COOKIE_ACCEPT_KEY, timeout=self.timeout)
        except WebDriverException as exc:
            log.debug("Cookie banner lookup failed: %s", exc)
            return False
        return self._click_quietly(control)

    def close_modal_if_present(self) -> bool:
        try:
            dialog = self.resolver.find(MODAL_DIALOG_KEY, timeout=self.timeout)
            if dialog.found:
                close = self.resolver.probe(MODAL_CLOSE_KEY, scope=dialog.element)
                if close.found and self._click_quietly(close):
                    return True
            return self._click_quietly(self.resolver.probe(MODAL_CLOSE_KEY))
        except WebDriverException as exc:
            log.debug("Modal lookup failed: %s", exc)
            return False

    def _click_quietly(self, control: Resolution) -> bool:
        if not control.found:
            return False
        try:
            self.page.click(control.element, self.timeout)
        except WebDriverException as exc:
            log.debug("Could not dismiss %s: %s", control.target, exc)
            return False
        log.info("Dismissed overlay via %s", control.strategy.describe())
        return True
