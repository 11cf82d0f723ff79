"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all tests in the test suite. The fake Playwright objects implement only
the calls the session, extractor and submission strategies make.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

import src.core.config as config_module
import src.core.error_logger as error_logger_module
import src.core.process_logger as process_logger_module
from src.automation.session import AutomationSession
from src.core.config import Config
from src.core.error_logger import ErrorLogger
from src.core.process_logger import ProcessLogger
from src.models.targets import BusinessData, DirectoryDescriptor


# Playwright raises playwright.async_api.TimeoutError; the extractor
# recognises it by class name.
PlaywrightTimeout = type("TimeoutError", (Exception,), {})


# ============================================================================
# Isolation
# ============================================================================

ENV_KEYS = [
    "GOOGLE_API_KEY",
    "GOOGLE_CUSTOM_SEARCH_ENGINE_ID",
    "SIMILARWEB_API_KEY",
    "GEMINI_API_KEY",
    "LLM_SWOT_ENABLED",
    "SUPABASE_ENABLED",
    "BATCH_DEADLINE_S",
    "BATCH_CONCURRENCY",
    "INTER_ITEM_DELAY_MS",
]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch):
    """Fresh config and file-only error/process loggers under tmp_path."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("BASE_OUT_DIR", str(tmp_path / "out"))

    monkeypatch.setattr(config_module, "_config", Config(env_path=tmp_path / "missing.env"))
    monkeypatch.setattr(
        error_logger_module, "_error_logger", ErrorLogger(fallback_dir=tmp_path / "logs" / "errors")
    )
    monkeypatch.setattr(
        process_logger_module, "_process_logger", ProcessLogger(fallback_dir=tmp_path / "logs" / "process")
    )
    yield


def _read_jsonl(directory: Path) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for path in sorted(directory.glob("*.jsonl")):
        for line in path.read_text("utf-8").splitlines():
            if line.strip():
                rows.append(json.loads(line))
    return rows


@pytest.fixture
def error_records(tmp_path: Path):
    """Callable returning every error record written so far."""
    return lambda: _read_jsonl(tmp_path / "logs" / "errors")


@pytest.fixture
def process_records(tmp_path: Path):
    """Callable returning every process step written so far."""
    return lambda: _read_jsonl(tmp_path / "logs" / "process")


# ============================================================================
# Fake Playwright
# ============================================================================

class FakeSite:
    """What the fake browser serves for one URL."""

    def __init__(
        self,
        html: str = "<html><head><title>Page</title></head><body></body></html>",
        status: int = 200,
        timeout: bool = False,
        elements: Iterable[str] = (),
        on_click: Optional[Dict[str, Iterable[str]]] = None,
        options: Optional[Dict[str, List[Tuple[str, str]]]] = None,
    ):
        self.html = html
        self.status = status
        self.timeout = timeout
        self.elements = set(elements)
        self.on_click = {k: set(v) for k, v in (on_click or {}).items()}
        self.options = dict(options or {})


class FakeResponse:
    def __init__(self, status: int):
        self.status = status


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    async def count(self) -> int:
        return 1 if self.selector in self.page.elements else 0

    async def is_visible(self) -> bool:
        return self.selector in self.page.elements

    async def evaluate(self, script: str):
        if "options" in script:
            return [list(pair) for pair in self.page.site.options.get(self.selector, [])]
        return "SELECT" if self.selector.startswith("select") else "INPUT"

    async def fill(self, value: str) -> None:
        self.page.filled[self.selector] = value

    async def select_option(self, value: str, timeout: Optional[int] = None) -> None:
        values = [v for v, _ in self.page.site.options.get(self.selector, [])]
        if value not in values:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for option {value!r}")
        self.page.selected[self.selector] = value

    async def click(self) -> None:
        self.page.clicked.append(self.selector)
        self.page.elements |= self.page.site.on_click.get(self.selector, set())


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.url = "about:blank"
        self.site = FakeSite()
        self.elements: set = set()
        self.filled: Dict[str, str] = {}
        self.selected: Dict[str, str] = {}
        self.clicked: List[str] = []

    async def goto(self, url: str, wait_until: str = "load", timeout: int = 30000):
        self.browser.visits.append(url)
        site = self.browser.sites.get(url)
        if site is None:
            raise Exception(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if site.timeout:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
        self.url = url
        self.site = site
        self.elements = set(site.elements)
        return FakeResponse(site.status)

    async def content(self) -> str:
        return self.site.html

    async def wait_for_timeout(self, ms: int) -> None:
        self.browser.waits.append(ms)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: Dict[str, Any]):
        self.browser = browser
        self.options = options
        self.pages: List[FakePage] = []
        self.closed = False

    async def new_page(self) -> FakePage:
        page = FakePage(self.browser)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True
        self.browser.contexts_closed += 1


class FakeBrowser:
    def __init__(self, sites: Optional[Dict[str, FakeSite]] = None):
        self.sites: Dict[str, FakeSite] = dict(sites or {})
        self.contexts: List[FakeContext] = []
        self.contexts_closed = 0
        self.close_count = 0
        self.visits: List[str] = []
        self.waits: List[int] = []

    async def new_context(self, **options) -> FakeContext:
        context = FakeContext(self, options)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_count += 1

    @property
    def pages(self) -> List[FakePage]:
        return [p for c in self.contexts for p in c.pages]


@pytest.fixture
def make_site():
    """The FakeSite class, for tests that register pages on the fake browser."""
    return FakeSite


@pytest.fixture
def fake_browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def fake_session(fake_browser: FakeBrowser) -> AutomationSession:
    """AutomationSession whose launch returns the fake browser."""
    async def launch(session):
        return fake_browser

    return AutomationSession(browser_factory=launch)


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_html() -> str:
    """A competitor home page touching every extraction query."""
    return """
    <html>
        <head>
            <title>Acme Marketing - Growth Agency</title>
            <meta name="description" content="Full-service growth marketing agency.">
            <meta name="keywords" content="seo, ppc, growth">
            <meta property="og:title" content="Acme Marketing">
            <meta property="og:description" content="We grow brands.">
            <meta property="og:image" content="https://acme.example/og.png">
            <meta name="twitter:card" content="summary_large_image">
            <link rel="canonical" href="https://acme.example/">
            <script src="https://www.googleadservices.com/pagead/conversion.js"></script>
        </head>
        <body>
            <nav>
                <a href="/services">Services</a>
                <a href="/pricing">Pricing</a>
                <a href="/blog">Blog</a>
            </nav>
            <main>
                <h1>AI-powered marketing for modern brands</h1>
                <h2>Our Services</h2>
                <div class="plan">Starter plan <span>$49</span> per month</div>
                <div class="plan">Growth plan <span>$199</span> per month</div>
                <a href="/blog/seo-checklist">The 2024 SEO checklist</a>
                <a href="/blog/marketing-budget">Planning a marketing budget</a>
                <a href="/article/business-growth">Business growth stories</a>
                <div class="sponsored">Partner offer</div>
                <button class="btn">Book a call</button>
                <form action="/contact" method="post">
                    <input type="email" name="email" placeholder="Your email">
                    <input type="submit" value="Send">
                </form>
            </main>
            <footer>
                <p>Call us: +1 (555) 123-4567 or hello@acme.example</p>
                <address>100 Main St, Springfield, IL</address>
                <a href="https://facebook.com/acme">Facebook</a>
                <a href="https://www.linkedin.com/company/acme">LinkedIn</a>
                <a href="https://x.com/acme">X</a>
            </footer>
        </body>
    </html>
    """


@pytest.fixture
def sample_business() -> BusinessData:
    return BusinessData(
        business_name="Springfield Plumbing",
        address="742 Evergreen Terrace",
        city="Springfield",
        state="IL",
        zip_code="62704",
        phone="(217) 555-0142",
        website="https://springfieldplumbing.example",
        email="office@springfieldplumbing.example",
        business_type="Plumber",
        categories=["Plumber", "Water Heater Installation"],
        description="Family-owned plumbing since 1985.",
    )


@pytest.fixture
def sample_directories() -> List[DirectoryDescriptor]:
    return [
        DirectoryDescriptor(name="Yelp", url="https://biz.yelp.com", directory_type="yelp", priority="High"),
        DirectoryDescriptor(name="Hotfrog", url="https://www.hotfrog.com/add", directory_type="hotfrog"),
    ]


# ============================================================================
# Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_gemini_response():
    """Factory for objects shaped like a Gemini GenerateContentResponse."""
    class MockResponse:
        def __init__(self, text: str):
            self.text = text

    def _create_response(data: Any) -> MockResponse:
        return MockResponse(text=data if isinstance(data, str) else json.dumps(data))

    return _create_response


@pytest.fixture
def mock_supabase_client():
    """Supabase client double recording inserted rows per table."""
    class MockTable:
        def __init__(self, fail: bool = False):
            self.rows: List[Dict[str, Any]] = []
            self.fail = fail

        def insert(self, row):
            if self.fail:
                raise RuntimeError("insert rejected")
            self.rows.append(row)
            return self

        def execute(self):
            return self

    class MockClient:
        def __init__(self):
            self.tables: Dict[str, MockTable] = {}
            self.fail = False

        def table(self, name: str) -> MockTable:
            if name not in self.tables:
                self.tables[name] = MockTable(self.fail)
            return self.tables[name]

    return MockClient()


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "expensive: mark test as expensive (calls paid APIs)"
    )
