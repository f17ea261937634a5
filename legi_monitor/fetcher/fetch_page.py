from selenium import webdriver
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.common.exceptions import TimeoutException, WebDriverException
from webdriver_manager.chrome import ChromeDriverManager
from urllib.parse import urlencode
import logging
import time

from legi_monitor.config import settings
from legi_monitor.errors import FetchError, FetchTimeoutError
from legi_monitor.parser.parse_content import today

logger = logging.getLogger(__name__)

# Rendered markup must hold still this long before the page counts as idle
IDLE_POLL_INTERVAL = 0.5
IDLE_MAX_POLLS = 20


def build_chrono_url(base_url, day):
    """Timeline URL restricted to a single day (YYYY-MM-DD on all three bounds)."""
    iso = day.isoformat()
    params = urlencode({'startYear': iso, 'endYear': iso, 'dateConsult': iso})
    separator = '&' if '?' in base_url else '?'
    return f"{base_url}{separator}{params}"


def _create_chrome_driver(user_agent=None):
    """Create and return a configured headless Chrome WebDriver."""
    chrome_options = Options()
    chrome_options.add_argument('--headless')
    chrome_options.add_argument('--no-sandbox')
    chrome_options.add_argument('--disable-setuid-sandbox')
    chrome_options.add_argument('--disable-dev-shm-usage')
    chrome_options.add_argument('--disable-gpu')
    chrome_options.add_argument('--window-size=1920,1080')
    chrome_options.add_argument(f'--user-agent={user_agent or settings.USER_AGENT}')

    service = Service(ChromeDriverManager().install())
    return webdriver.Chrome(service=service, options=chrome_options)


def _wait_until_idle(driver):
    """
    Wait until the rendered markup stops growing, so the timeline's
    XHR-loaded sections are in the DOM before we read it.
    """
    previous = -1
    for _ in range(IDLE_MAX_POLLS):
        current = len(driver.page_source)
        if current == previous:
            return
        previous = current
        time.sleep(IDLE_POLL_INTERVAL)
    logger.warning("Page markup still changing, reading it anyway")


def fetch_chrono_page(day=None, timeout=None, base_url=None, driver_factory=None):
    """
    Load the ChronoLegi timeline for *day* in headless Chrome.

    Args:
        day:            date used for the startYear/endYear/dateConsult
                        parameters (defaults to today)
        timeout:        page load budget in seconds
        driver_factory: callable returning a WebDriver

    Returns:
        str: fully rendered page HTML

    Raises:
        FetchTimeoutError: if the page does not load within *timeout*.
        FetchError: on any other browser failure.
    """
    day = day or today()
    timeout = timeout or settings.FETCH_TIMEOUT
    url = build_chrono_url(base_url or settings.CHRONO_LEGI_URL, day)
    driver_factory = driver_factory or _create_chrome_driver

    try:
        driver = driver_factory()
    except WebDriverException as e:
        raise FetchError(f"Could not start Chrome: {e}") from e

    try:
        logger.info(f"Loading page with Selenium: {url}")
        driver.set_page_load_timeout(timeout)
        driver.get(url)

        wait = WebDriverWait(driver, timeout)
        wait.until(EC.presence_of_element_located((By.TAG_NAME, 'body')))
        wait.until(
            lambda d: d.execute_script('return document.readyState') == 'complete'
        )
        _wait_until_idle(driver)

        html = driver.page_source
        logger.info(f"Fetched {len(html)} characters of HTML")
        return html

    except TimeoutException as e:
        raise FetchTimeoutError(url, timeout) from e
    except WebDriverException as e:
        raise FetchError(f"Browser error while loading {url}: {e}") from e
    finally:
        try:
            driver.quit()
        except WebDriverException as e:
            logger.warning(f"Could not close Chrome cleanly: {e}")
