import pytest
from selenium.common.exceptions import WebDriverException

from conftest import build, by_id, element, page, text

from visible_copy.config import PickerConfig
from visible_copy.dom.builder import DocumentBuilder
from visible_copy.dom.js_scripts import (CLEAR_SELECTION_SCRIPT,
                                         DRAIN_EVENTS_SCRIPT,
                                         EVENT_RECORDER_SCRIPT,
                                         INSTALL_STYLE_SCRIPT,
                                         LEGACY_COPY_SCRIPT, PICKER_CSS,
                                         RENDER_UI_SCRIPT, SNAPSHOT_SCRIPT,
                                         UNINSTALL_SCRIPT)
from visible_copy.live.bridge import BrowserClipboard, LivePageBridge
from visible_copy.picker.clipboard import ClipboardError
from visible_copy.picker.launcher import PickerLauncher
from visible_copy.picker.session import PickerSession
from visible_copy.types import PickerState


class FakeDriver:
    """Answers the bridge's scripts the way the injected JavaScript would."""

    def __init__(self, snapshot=None, batches=(), clipboard_result=None):
        self.async_calls = []
        self.batches = list(batches)
        self.calls = []
        self.clipboard_result = clipboard_result
        self.failing = set()
        self.legacy_copies = []
        self.rendered = []
        self.snapshot = snapshot

    def execute_script(self, script, *args):
        self.calls.append((script, args))
        if script in self.failing:
            raise WebDriverException("script failed")
        if script == SNAPSHOT_SCRIPT:
            return self.snapshot
        if script == DRAIN_EVENTS_SCRIPT:
            return self.batches.pop(0) if self.batches else []
        if script == RENDER_UI_SCRIPT:
            self.rendered.append(args[0])
            return True
        if script == LEGACY_COPY_SCRIPT:
            self.legacy_copies.append(args[0])
            return True
        return None

    def execute_async_script(self, script, *args):
        self.async_calls.append(args)
        if isinstance(self.clipboard_result, Exception):
            raise self.clipboard_result
        return self.clipboard_result

    def scripts(self):
        return [script for script, _ in self.calls]


def snapshot_records():
    return page(
        element("div", element("p", text("Hello"), attrs={"id": "p"}, box=(10, 10, 200, 20)),
                attrs={"id": "card"}, box=(0, 0, 400, 100)),
    )


@pytest.fixture
def document():
    return build(snapshot_records())


@pytest.fixture
def config():
    return PickerConfig(acknowledgment_delay=0, notification_fade=0, poll_interval=0.001)


def entry(event_type, x=0, y=0, target=None, ui_target=None, key="", button=0, hits=None):
    recorded = {
        "type": event_type, "x": x, "y": y, "button": button, "key": key,
        "scrollX": 0, "scrollY": 0, "target": target, "uiTarget": ui_target,
    }
    if hits is not None:
        recorded["hits"] = hits
    return recorded


class TestBrowserClipboard:
    def test_successful_write(self):
        driver = FakeDriver()
        BrowserClipboard(driver).write_text("hi")
        assert driver.async_calls == [("hi",)]

    def test_rejected_write(self):
        with pytest.raises(ClipboardError, match="NotAllowedError"):
            BrowserClipboard(FakeDriver(clipboard_result="NotAllowedError: denied")).write_text("hi")

    def test_driver_failure(self):
        driver = FakeDriver(clipboard_result=WebDriverException("timeout"))
        with pytest.raises(ClipboardError):
            BrowserClipboard(driver).write_text("hi")


class TestDocumentBuilder:
    def test_from_driver_passes_selector(self):
        snapshot = snapshot_records()
        driver = FakeDriver(snapshot=snapshot)

        document, target = DocumentBuilder.from_driver(driver, "#card")

        assert driver.calls == [(SNAPSHOT_SCRIPT, ("#card",))]
        assert target is None
        assert by_id(document, "card") is not None

    def test_script_failure_is_reraised_with_context(self):
        driver = FakeDriver()
        driver.failing.add(SNAPSHOT_SCRIPT)

        with pytest.raises(WebDriverException, match="Failed to snapshot document"):
            DocumentBuilder.from_driver(driver)

    def test_empty_snapshot(self):
        with pytest.raises(WebDriverException):
            DocumentBuilder.from_driver(FakeDriver(snapshot=None))


class TestLivePageBridge:
    def test_install_and_uninstall(self, document, config):
        driver = FakeDriver()
        bridge = LivePageBridge(driver, document, config)

        bridge.install()
        bridge.install()

        assert driver.calls[:2] == [(INSTALL_STYLE_SCRIPT, (PICKER_CSS,)), (EVENT_RECORDER_SCRIPT, ())]
        assert len(driver.calls) == 2
        assert document.legacy_copy_handler is not None

        bridge.uninstall()
        bridge.uninstall()

        assert driver.scripts().count(UNINSTALL_SCRIPT) == 1
        assert document.legacy_copy_handler is None

    def test_pump_delivers_hover_and_lock(self, document, config):
        paragraph = by_id(document, "p")
        driver = FakeDriver(batches=[[entry("mousemove", 20, 15, target=paragraph),
                                      entry("mousedown", 20, 15, target=paragraph)]])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        bridge.install()
        session.start()

        delivered = bridge.pump(session)

        assert delivered == 2
        assert session.state == PickerState.LOCKED
        assert session.selected == paragraph
        markup = driver.rendered[-1]
        assert 'id="vc-panel"' in markup
        assert f'data-vc-id="{session.panel.node}"' in markup

    def test_unchanged_document_is_not_rendered_again(self, document, config):
        driver = FakeDriver()
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        bridge.install()
        session.start()

        bridge.pump(session)
        bridge.pump(session)

        assert len(driver.rendered) == 1

    def test_run_until_cancel_key(self, document, config):
        driver = FakeDriver(batches=[[], [entry("keydown", key="Escape", target=document.body)]])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()

        assert bridge.run(session) is None
        assert session.state == PickerState.CANCELLED
        assert driver.scripts()[-1] == UNINSTALL_SCRIPT

    def test_run_returns_copied_content(self, document, config):
        paragraph = by_id(document, "p")
        driver = FakeDriver(batches=[[entry("mousemove", 20, 15, target=paragraph),
                                      entry("mousedown", 20, 15, target=paragraph)]])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()
        bridge.pump(session)
        driver.batches.append([entry("click", ui_target=session.panel.button("copy"))])

        assert bridge.run(session) == "<p>Hello</p>"
        assert driver.async_calls == [("<p>Hello</p>",)]
        assert session.state == PickerState.COPIED
        assert not bridge.installed

    def test_clipboard_rejection_uses_page_legacy_copy(self, document, config):
        paragraph = by_id(document, "p")
        driver = FakeDriver(batches=[[entry("mousemove", 20, 15, target=paragraph),
                                      entry("mousedown", 20, 15, target=paragraph)]],
                            clipboard_result="NotAllowedError")
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()
        bridge.pump(session)

        session.copy()

        assert driver.legacy_copies == ["<p>Hello</p>"]
        assert session.state == PickerState.COPIED

    def test_mouseover_becomes_enter_and_leave(self, document, config):
        paragraph = by_id(document, "p")
        driver = FakeDriver(batches=[[entry("mousemove", 20, 15, target=paragraph),
                                      entry("mousedown", 20, 15, target=paragraph)]])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()
        bridge.pump(session)
        tag = next(
            node_id for node_id in document.iter_subtree(session.panel.node)
            if document.node(node_id).is_element and "vc-tag-clickable" in document.class_list(node_id)
        )

        driver.batches.append([entry("mouseover", ui_target=tag)])
        bridge.pump(session)
        assert "vc-tag-hover" in document.class_list(tag)

        driver.batches.append([entry("mouseover", target=paragraph)])
        bridge.pump(session)
        assert "vc-tag-hover" not in document.class_list(tag)

    def test_existing_selection_is_cleared_in_page(self, document, config):
        paragraph = by_id(document, "p")
        document.set_selection(document.children(paragraph)[0])
        driver = FakeDriver()
        bridge = LivePageBridge(driver, document, config)
        bridge.install()

        session = PickerLauncher(BrowserClipboard(driver), config).trigger(document)
        bridge.pump(session)
        bridge.pump(session)

        assert session.state == PickerState.LOCKED
        assert document.get_selection() is None
        assert driver.scripts().count(CLEAR_SELECTION_SCRIPT) == 1
        assert "removeAllRanges" in CLEAR_SELECTION_SCRIPT

    def test_page_selection_is_left_alone_without_one(self, document, config):
        driver = FakeDriver()
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()

        bridge.pump(session)

        assert CLEAR_SELECTION_SCRIPT not in driver.scripts()

    def test_browser_hits_decide_the_hovered_element(self, config):
        document = build(page(
            element("header", text("Menu"), attrs={"id": "hdr"}, box=(0, 0, 1280, 60)),
            element("main", element("p", text("Body"), attrs={"id": "para"}, box=(0, 0, 1280, 400)),
                    box=(0, 0, 1280, 400)),
        ))
        header = by_id(document, "hdr")
        driver = FakeDriver(batches=[[
            entry("mousemove", 10, 10, target=header, hits=[header, document.body, document.document_element]),
        ]])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()

        bridge.pump(session)

        assert session.hovered == header
        assert session.breadcrumb.labels() == ["header#hdr"]

    def test_events_for_stale_ui_are_dropped(self, document, config):
        driver = FakeDriver(batches=[[entry("click", ui_target=10_000)]])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()

        assert bridge.pump(session) == 1
        assert session.state == PickerState.IDLE
        assert document.navigation_requests == []

    def test_lost_recorder_cancels_session(self, document, config):
        driver = FakeDriver(batches=[None])
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()

        bridge.run(session)

        assert session.state == PickerState.CANCELLED
        assert not session.active

    def test_render_failures_do_not_end_the_session(self, document, config):
        driver = FakeDriver()
        driver.failing.add(RENDER_UI_SCRIPT)
        bridge = LivePageBridge(driver, document, config)
        session = PickerSession(document, BrowserClipboard(driver), config)
        session.start()
        bridge.install()

        bridge.pump(session)

        assert session.active
