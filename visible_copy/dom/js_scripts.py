"""JavaScript run inside the live page by the document builder and the bridge."""

UI_ROOT_ID = "__vc-ui-root"
STYLE_ID = "__vc-style"
UI_ID_ATTRIBUTE = "data-vc-id"

# arguments[0]: optional CSS selector whose match is reported as "target".
SNAPSHOT_SCRIPT = """
const selector = arguments[0];
const nodes = [];
const ids = new Map();

function register(node) {
    const id = nodes.length;
    nodes.push(node);
    ids.set(node, id);
    return id;
}

function isPickerUI(el) {
    return el.id === '__vc-ui-root' || el.id === '__vc-style';
}

function recordNode(node) {
    if (node.nodeType === Node.TEXT_NODE) {
        return { id: register(node), kind: 'text', text: node.data };
    }
    if (node.nodeType === Node.COMMENT_NODE) {
        return { id: register(node), kind: 'comment', text: node.data };
    }
    if (node.nodeType !== Node.ELEMENT_NODE || isPickerUI(node)) {
        return null;
    }

    const record = {
        id: register(node),
        kind: 'element',
        tag: node.tagName.toLowerCase(),
        attributes: Array.from(node.attributes).map(a => [a.name, a.value]),
        children: []
    };

    let style;
    try {
        style = window.getComputedStyle(node);
    } catch (e) {
        style = null;
    }
    if (style) {
        record.style = {
            display: style.display,
            opacity: style.opacity,
            pointerEvents: style.pointerEvents,
            visibility: style.visibility
        };
    }

    let rect;
    try {
        rect = node.getBoundingClientRect();
    } catch (e) {
        rect = { left: 0, top: 0, width: 0, height: 0 };
    }
    record.position = {
        x: rect.left + window.scrollX,
        y: rect.top + window.scrollY,
        width: typeof node.offsetWidth === 'number' ? node.offsetWidth : rect.width,
        height: typeof node.offsetHeight === 'number' ? node.offsetHeight : rect.height
    };

    for (const child of node.childNodes) {
        const childRecord = recordNode(child);
        if (childRecord) {
            record.children.push(childRecord);
        }
    }
    return record;
}

const root = recordNode(document.documentElement);
window.__vcNodes = nodes;

let selection = null;
const sel = window.getSelection();
if (sel && sel.rangeCount > 0 && !sel.isCollapsed) {
    const range = sel.getRangeAt(0);
    if (ids.has(range.startContainer) && ids.has(range.endContainer)) {
        selection = { start: ids.get(range.startContainer), end: ids.get(range.endContainer) };
    }
}

let target = null;
if (selector) {
    const match = document.querySelector(selector);
    if (match && ids.has(match)) {
        target = ids.get(match);
    }
}

return {
    root: root,
    scroll: { x: window.scrollX, y: window.scrollY },
    viewport: { width: window.innerWidth, height: window.innerHeight },
    selection: selection,
    target: target
};
"""

# Captures input at window level before the page sees it. Pointer and key
# events are suppressed; moves and hover transitions are only recorded.
EVENT_RECORDER_SCRIPT = """
if (window.__vcRecorder) {
    return;
}

const known = new Map((window.__vcNodes || []).map((node, index) => [node, index]));
const queue = [];
const suppressed = new Set([
    'mousedown', 'mouseup', 'click', 'pointerdown', 'pointerup',
    'touchstart', 'touchend', 'keydown'
]);
const types = Array.from(suppressed).concat(['mousemove', 'mouseover']);

function pageNodeId(node) {
    while (node) {
        if (known.has(node)) {
            return known.get(node);
        }
        node = node.parentNode;
    }
    return null;
}

function uiNodeId(node) {
    while (node) {
        if (node.nodeType === Node.ELEMENT_NODE && node.hasAttribute('data-vc-id')) {
            return parseInt(node.getAttribute('data-vc-id'), 10);
        }
        node = node.parentNode;
    }
    return null;
}

// Page elements under the point, topmost first, as the browser paints them.
function pageHits(x, y) {
    const uiRoot = document.getElementById('__vc-ui-root');
    const hits = [];
    for (const el of document.elementsFromPoint(x, y)) {
        if (uiRoot && uiRoot.contains(el)) {
            continue;
        }
        if (known.has(el)) {
            hits.push(known.get(el));
        }
    }
    return hits;
}

function record(event) {
    const point = (event.changedTouches && event.changedTouches[0]) || event;
    const entry = {
        type: event.type,
        x: point.clientX || 0,
        y: point.clientY || 0,
        button: event.button || 0,
        key: event.key || '',
        scrollX: window.scrollX,
        scrollY: window.scrollY,
        target: pageNodeId(event.target),
        uiTarget: uiNodeId(event.target)
    };
    if (event.type === 'mousemove') {
        entry.hits = pageHits(entry.x, entry.y);
    }

    const last = queue[queue.length - 1];
    if (event.type === 'mousemove' && last && last.type === 'mousemove') {
        queue[queue.length - 1] = entry;
    } else {
        queue.push(entry);
    }

    if (suppressed.has(event.type)) {
        event.preventDefault();
        event.stopPropagation();
        event.stopImmediatePropagation();
    }
}

for (const type of types) {
    window.addEventListener(type, record, true);
}
window.__vcRecorder = { queue: queue, handler: record, types: types };
"""

DRAIN_EVENTS_SCRIPT = """
const recorder = window.__vcRecorder;
if (!recorder) {
    return null;
}
return recorder.queue.splice(0, recorder.queue.length);
"""

CLEAR_SELECTION_SCRIPT = """
const selection = window.getSelection();
if (selection) {
    selection.removeAllRanges();
}
"""

# arguments[0]: stylesheet text.
INSTALL_STYLE_SCRIPT = """
let style = document.getElementById('__vc-style');
if (!style) {
    style = document.createElement('style');
    style.id = '__vc-style';
    (document.head || document.documentElement).appendChild(style);
}
style.textContent = arguments[0];

let root = document.getElementById('__vc-ui-root');
if (!root) {
    root = document.createElement('div');
    root.id = '__vc-ui-root';
    document.documentElement.appendChild(root);
}
"""

# arguments[0]: serialized picker UI.
RENDER_UI_SCRIPT = """
const root = document.getElementById('__vc-ui-root');
if (!root) {
    return false;
}
root.innerHTML = arguments[0];
return true;
"""

UNINSTALL_SCRIPT = """
const recorder = window.__vcRecorder;
if (recorder) {
    for (const type of recorder.types) {
        window.removeEventListener(type, recorder.handler, true);
    }
    delete window.__vcRecorder;
}
for (const id of ['__vc-ui-root', '__vc-style']) {
    const el = document.getElementById(id);
    if (el) {
        el.remove();
    }
}
delete window.__vcNodes;
"""

# Async script; arguments[0]: text, arguments[1]: completion callback. The
# callback receives null on success or an error message.
CLIPBOARD_WRITE_SCRIPT = """
const text = arguments[0];
const done = arguments[arguments.length - 1];
if (!navigator.clipboard || !navigator.clipboard.writeText) {
    done('Clipboard API unavailable');
    return;
}
navigator.clipboard.writeText(text).then(
    () => done(null),
    (err) => done(String(err))
);
"""

# arguments[0]: text. Returns the result of execCommand('copy').
LEGACY_COPY_SCRIPT = """
const textarea = document.createElement('textarea');
textarea.value = arguments[0];
textarea.style.position = 'fixed';
textarea.style.opacity = '0';
document.body.appendChild(textarea);
textarea.select();
let copied = false;
try {
    copied = document.execCommand('copy');
} finally {
    document.body.removeChild(textarea);
}
return copied;
"""

PICKER_CSS = """
#vc-highlight {
    position: absolute;
    pointer-events: none;
    z-index: 2147483646;
    border: 2px solid #2563eb;
    background: rgba(37, 99, 235, 0.12);
    box-sizing: border-box;
    transition: all 0.05s ease-out;
}
#vc-highlight.vc-highlight-locked {
    border-color: #16a34a;
    background: rgba(22, 163, 74, 0.12);
}
#vc-breadcrumb {
    position: fixed;
    top: 8px;
    left: 50%;
    transform: translateX(-50%);
    z-index: 2147483647;
    pointer-events: none;
    padding: 4px 10px;
    border-radius: 4px;
    background: #111827;
    color: #e5e7eb;
    font: 12px/1.4 ui-monospace, Menlo, Consolas, monospace;
    white-space: nowrap;
}
#vc-breadcrumb .vc-crumb-sep { margin: 0 4px; color: #6b7280; }
#vc-breadcrumb .vc-crumb-active { color: #93c5fd; font-weight: bold; }
#vc-panel {
    position: fixed;
    right: 16px;
    bottom: 16px;
    width: 480px;
    max-height: 60vh;
    display: none;
    flex-direction: column;
    z-index: 2147483647;
    border-radius: 8px;
    background: #1f2937;
    color: #e5e7eb;
    box-shadow: 0 10px 30px rgba(0, 0, 0, 0.4);
    font: 13px/1.4 -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
}
#vc-panel.vc-panel-visible { display: flex; }
#vc-panel .vc-panel-header { display: flex; gap: 6px; padding: 8px; align-items: center; }
#vc-panel .vc-btn-group { display: flex; margin-left: auto; }
#vc-panel .vc-btn {
    padding: 4px 10px;
    border: 1px solid #4b5563;
    border-radius: 4px;
    background: #374151;
    color: inherit;
    cursor: pointer;
    font: inherit;
}
#vc-panel .vc-btn-active { background: #2563eb; border-color: #2563eb; }
#vc-panel .vc-btn-copy { background: #16a34a; border-color: #16a34a; }
#vc-panel .vc-panel-info { padding: 0 8px 6px; color: #9ca3af; font-size: 12px; }
#vc-panel .vc-panel-preview { overflow: auto; padding: 0 8px 8px; }
#vc-panel .vc-code {
    margin: 0;
    white-space: pre-wrap;
    font: 12px/1.5 ui-monospace, Menlo, Consolas, monospace;
}
#vc-panel .vc-tag { color: #93c5fd; }
#vc-panel .vc-tag-clickable { cursor: pointer; }
#vc-panel .vc-tag-hover { background: rgba(147, 197, 253, 0.2); }
#vc-panel .vc-attr-name { color: #fcd34d; }
#vc-panel .vc-attr-value { color: #86efac; }
#vc-panel .vc-text { color: #e5e7eb; }
#vc-panel .vc-collapse { cursor: pointer; color: #9ca3af; margin-right: 2px; }
.vc-notification {
    position: fixed;
    top: 16px;
    right: 16px;
    z-index: 2147483647;
    padding: 8px 14px;
    border-radius: 6px;
    background: #16a34a;
    color: #fff;
    font: 14px/1.4 -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
    opacity: 1;
    transition: opacity 0.3s ease;
}
.vc-notification.vc-notification-fade { opacity: 0; }
"""
