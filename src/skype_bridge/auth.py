"""
Credential acquisition through an automated web login.

A headless browser signs in to the Skype web client while a request hook
watches its outbound POSTs. The web client authenticates its own gateway
calls with a RegistrationToken header set and an X-Skypetoken bearer token;
once both have been seen the header set is frozen into the HeaderStore.

The login is not retried. If nothing is captured within the watchdog
timeout a screenshot is written and AcquisitionTimeout is raised.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Request, Route, async_playwright

from skype_bridge.errors import AcquisitionTimeout
from skype_bridge.headers import HeaderStore
from skype_bridge.models.config import BridgeConfig
from skype_bridge.models.message import SessionCredentials

logger = logging.getLogger(__name__)

LOGIN_URL = "https://web.skype.com"
MICROSOFT_LOGIN_URL = (
    "https://login.live.com/ppsecure/post.srf?wa=wsignin1.0&rpsnv=13&ct=1476159250"
    "&rver=6.6.6577.0&wp=MBI_SSL&wreply=https%3A%2F%2Flw.skype.com%2Flogin%2Foauth%2Fproxy"
    "%3Fclient_id%3D578134%26redirect_uri%3Dhttps%253A%252F%252Fweb.skype.com%252F"
    "%26site_name%3Dlw.skype.com&lc=1033&id=293290&mkt=en-US"
)

# Taken from the production web client.
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:49.0) Gecko/20100101 Firefox/49.0"
CLIENT_INFO = (
    "os=Linux; osVer=U; proc=Linux x86_64; lcid=en-us; deviceType=1; country=n/a; "
    "clientName=skype.com; clientVer=908/1.62.0.45//skype.com"
)

REGISTRATION_HEADER = "registrationtoken"
SKYPE_TOKEN_HEADER = "x-skypetoken"
READY_THRESHOLD = 2

SUBMIT_DELAY = 4.0
SECOND_STEP_DELAY = 2.0
IMAGE_PATTERN = "**/*.{png,jpg,jpeg,gif,svg,ico,webp}"

NATIVE_SUBMIT_JS = """(user) => {
    document.getElementById('username').value = user.username;
    document.getElementById('password').value = user.password;
    document.getElementById('signIn').click();
}"""

MICROSOFT_SUBMIT_JS = """(user) => {
    const inputs = document.getElementsByTagName('input');
    inputs[0].value = user.username;
    inputs[2].value = user.password;
    document.getElementsByTagName('form')[0].submit();
}"""

MICROSOFT_PASSWORD_JS = """(user) => {
    document.getElementsByTagName('input')[2].value = user.password;
    document.getElementsByTagName('form')[0].submit();
}"""


class CredentialAcquirer:
    def __init__(
        self,
        config: BridgeConfig,
        store: HeaderStore,
        *,
        playwright_factory: Callable[[], Any] = async_playwright,
        screenshot_path: str = "error.png",
        submit_delay: float = SUBMIT_DELAY,
        second_step_delay: float = SECOND_STEP_DELAY,
    ):
        self._config = config
        self._store = store
        self._playwright_factory = playwright_factory
        self._screenshot_path = screenshot_path
        self._submit_delay = submit_delay
        self._second_step_delay = second_step_delay

        self._captured: Optional[dict[str, str]] = None
        self._successes = 0
        self._ready: Optional[asyncio.Event] = None
        self.done = False

    @property
    def login_url(self) -> str:
        return MICROSOFT_LOGIN_URL if self._config.microsoft else LOGIN_URL

    @property
    def successes(self) -> int:
        return self._successes

    def on_request(self, request: Request) -> None:
        """Request hook: pick credential headers off the web client's POSTs."""
        if request.method != "POST":
            return
        headers = {name.lower(): value for name, value in request.headers.items()}

        if REGISTRATION_HEADER in headers:
            logger.debug("found RegistrationToken on %s", request.url)
            self._captured = dict(request.headers)
            self._successes += 1
        if SKYPE_TOKEN_HEADER in headers:
            logger.debug("found X-Skypetoken on %s", request.url)
            self._store.set_token(headers[SKYPE_TOKEN_HEADER])
            self._successes += 1

        if self._successes > READY_THRESHOLD and self._captured is not None and not self.done:
            self._mark_ready()

    def _mark_ready(self) -> None:
        self.done = True
        self._store.update(self._captured or {})
        self._store.inject("User-Agent", USER_AGENT)
        self._store.inject("ClientInfo", CLIENT_INFO)
        logger.info("session credentials captured")
        if self._ready is not None:
            self._ready.set()

    async def acquire(self) -> SessionCredentials:
        """Log in and capture credentials. Raises AcquisitionTimeout."""
        ready = asyncio.Event()
        self._ready = ready
        if self.done:
            ready.set()

        async with self._playwright_factory() as pw:
            browser = await pw.chromium.launch(headless=self._config.headless)
            try:
                page = await browser.new_page()
                await page.route(IMAGE_PATTERN, _block)
                page.on("request", self.on_request)
                try:
                    await asyncio.wait_for(self._login(page, ready), timeout=self._config.login_timeout)
                except asyncio.TimeoutError:
                    logger.error("Skype web login failed, see %s", self._screenshot_path)
                    await self._capture_failure(page)
                    raise AcquisitionTimeout(
                        f"No session credentials after {self._config.login_timeout}s",
                        details={"screenshot": self._screenshot_path, "url": self.login_url},
                    )
            finally:
                await browser.close()

        return self._store.credentials()

    async def _login(self, page: Page, ready: asyncio.Event) -> None:
        try:
            await page.goto(self.login_url)
            logger.debug("login page opened")
        except PlaywrightError as e:
            # Sign-in redirects can abort the first navigation.
            logger.warning("login navigation failed: %s", e)
        submit = asyncio.get_running_loop().create_task(self._submit(page))
        try:
            await ready.wait()
        finally:
            if not submit.done():
                submit.cancel()

    async def _submit(self, page: Page) -> None:
        user = {"username": self._config.username, "password": self._config.password}
        try:
            await asyncio.sleep(self._submit_delay)
            if self._config.microsoft:
                logger.debug("login with microsoft account")
                await page.evaluate(MICROSOFT_SUBMIT_JS, user)
                await asyncio.sleep(self._second_step_delay)
                logger.debug("microsoft login, password step")
                await page.evaluate(MICROSOFT_PASSWORD_JS, user)
            else:
                logger.debug("login with skype account")
                await page.evaluate(NATIVE_SUBMIT_JS, user)
        except PlaywrightError as e:
            logger.warning("login form submission failed: %s", e)

    async def _capture_failure(self, page: Page) -> None:
        try:
            await page.screenshot(path=self._screenshot_path)
        except PlaywrightError as e:
            logger.warning("could not write %s: %s", self._screenshot_path, e)


async def _block(route: Route) -> None:
    await route.abort()
