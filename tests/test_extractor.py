import pytest

from conftest import build, by_id, comment, element, hidden, page, text

from visible_copy.extraction.extractor import (extract_html, extract_text,
                                               is_kept_attribute, prune)


def extract_both(snapshot_children, target="target"):
    document = build(page(*snapshot_children))
    node_id = by_id(document, target)
    return extract_html(document, node_id), extract_text(document, node_id)


def test_hello_world_scenario():
    html, content = extract_both([
        element(
            "div",
            element("p", text("Hello")),
            hidden("span", text("World")),
            attrs={"id": "target"},
        ),
    ])

    assert html == "<div><p>Hello</p></div>"
    assert content == "Hello"


def test_extraction_is_idempotent_and_leaves_document_untouched():
    document = build(page(
        element("article", element("h2", text("Title")), element("p", text("Body")), attrs={"id": "target"}),
    ))
    node_id = by_id(document, "target")
    size, version = len(document), document.version

    first = extract_html(document, node_id)
    second = extract_html(document, node_id)

    assert first == second
    assert extract_text(document, node_id) == extract_text(document, node_id)
    assert (len(document), document.version) == (size, version)
    assert document.get_attribute(node_id, "id") == "target"


@pytest.mark.parametrize("secret", [
    hidden("p", text("secret"), element("b", text("deeper"))),
    element("p", text("secret"), element("b", text("deeper")), style={"visibility": "hidden"}),
    element("p", text("secret"), element("b", text("deeper")), style={"opacity": "0"}),
    element("p", text("secret"), element("b", text("deeper")), box=(0, 0, 0, 0)),
])
def test_invisible_elements_leave_no_trace(secret):
    html, content = extract_both([element("div", element("p", text("shown")), secret, attrs={"id": "target"})])

    for output in (html, content):
        assert "shown" in output
        assert "secret" not in output
        assert "deeper" not in output
    assert html == "<div><p>shown</p></div>"


@pytest.mark.parametrize("tag", ["script", "style", "noscript", "svg", "canvas", "template", "iframe", "object"])
def test_strip_set_elements_are_removed_even_when_visible(tag):
    html, content = extract_both([
        element("div", element("p", text("kept")), element(tag, text("payload")), attrs={"id": "target"}),
    ])

    assert html == "<div><p>kept</p></div>"
    assert content == "kept"


def test_only_whitelisted_attributes_survive():
    html, _ = extract_both([
        element(
            "div",
            element(
                "a",
                text("go"),
                attrs={
                    "href": "/x", "class": "btn", "style": "color: red", "data-track": "1",
                    "onclick": "steal()", "xlink:href": "#icon", "TITLE": "Go there",
                },
            ),
            element("img", attrs={"src": "a.png", "alt": "A", "width": "10", "loading": "lazy"}),
            attrs={"id": "target", "class": "card", "lang": "en"},
        ),
    ])

    assert html == (
        '<div lang="en"><a href="/x" xlink:href="#icon" TITLE="Go there">go</a>'
        '<img src="a.png" alt="A"></div>'
    )


def test_attribute_matching_uses_local_name():
    assert is_kept_attribute("xml:lang")
    assert is_kept_attribute("HREF")
    assert not is_kept_attribute("href:custom")
    assert not is_kept_attribute("onclick")


def test_comments_and_blank_text_are_dropped():
    html, _ = extract_both([
        element("div", text("\n  "), comment(" tracking "), element("p", text("a")), text("  "), attrs={"id": "target"}),
    ])

    assert html == "<div><p>a</p></div>"


def test_root_is_retained_when_it_would_fail_the_checks():
    html, content = extract_both([
        element("section", element("p", text("inside")), attrs={"id": "target"}, style={"display": "none"}),
    ])

    assert html == "<section><p>inside</p></section>"
    assert content == "inside"


def test_stripped_tag_as_root_is_retained():
    html, _ = extract_both([
        element("svg", element("title", text("Logo")), attrs={"id": "target", "viewBox": "0 0 10 10"}),
    ])

    assert html == "<svg><title>Logo</title></svg>"


def test_clone_nodes_without_live_counterpart_are_dropped(monkeypatch):
    document = build(page(element("div", element("p", text("a")), attrs={"id": "target"})))
    node_id = by_id(document, "target")
    clone = document.clone

    def clone_with_orphan(source_id):
        tree, origins = clone(source_id)
        tree.append_child(tree.root, tree.create_element("p", text="orphan"))
        return tree, origins

    monkeypatch.setattr(document, "clone", clone_with_orphan)

    assert extract_html(document, node_id) == "<div><p>a</p></div>"


def test_pruned_tree_maps_back_to_live_nodes():
    document = build(page(
        element("ul", element("li", text("one"), attrs={"id": "one"}), hidden("li", text("two")), attrs={"id": "target"}),
    ))
    pruned = prune(document, by_id(document, "target"))

    assert pruned.origins[pruned.root] == by_id(document, "target")
    items = pruned.tree.element_children(pruned.root)
    assert [pruned.origins[item] for item in items] == [by_id(document, "one")]
    assert all(clone_id in pruned.tree for clone_id in pruned.origins)


class TestTextMode:
    def test_adjacent_blocks_are_separated_by_one_newline(self):
        _, content = extract_both([
            element("div", element("h1", text("Title")), element("p", text("First   para")), element("p", text("Second")),
                    attrs={"id": "target"}),
        ])
        assert content == "Title\nFirst para\nSecond"

    def test_inline_elements_join_with_spaces(self):
        _, content = extract_both([
            element("p", text("Hello "), element("b", text("bold")), text(" world"), attrs={"id": "target"}),
        ])
        assert content == "Hello bold world"

    def test_line_breaks(self):
        _, content = extract_both([
            element("p", text("a"), element("br"), text("b"), attrs={"id": "target"}),
        ])
        assert content == "a\nb"

    def test_list_items(self):
        _, content = extract_both([
            element("ul", element("li", text("one")), element("li", text("two")), attrs={"id": "target"}),
        ])
        assert content == "one\ntwo"

    def test_nested_and_empty_blocks_never_stack_newlines(self):
        _, content = extract_both([
            element(
                "div",
                element("div", element("p", text("a"))),
                element("div"),
                element("section", element("div", element("p", text("b  "), text("  c")))),
                attrs={"id": "target"},
            ),
        ])

        assert content == "a\nb c"
        assert "\n\n\n" not in content
        assert "  " not in content

    def test_empty_selection_gives_empty_text(self):
        _, content = extract_both([element("div", hidden("p", text("x")), attrs={"id": "target"})])
        assert content == ""
