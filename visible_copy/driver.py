from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.chrome.webdriver import WebDriver
from webdriver_manager.chrome import ChromeDriverManager


def new_webdriver(headless: bool = False) -> WebDriver:
    """
    Start a Chrome session suitable for picking.

    The clipboard permission is granted up front so that the async Clipboard
    API can be used without a prompt.
    """
    options = Options()
    options.page_load_strategy = "eager"
    options.add_argument("--disable-extensions")
    options.add_argument("--start-maximized")
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    options.add_experimental_option("prefs", {
        "profile.content_settings.exceptions.clipboard": {
            "*": {"setting": 1},
        },
    })

    if headless:
        options.add_argument("--headless=new")
        options.add_argument("--window-size=1280,800")

    return webdriver.Chrome(service=Service(ChromeDriverManager().install()), options=options)
