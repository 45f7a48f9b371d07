import pytest

from visible_copy.dom.models import NodeKind
from visible_copy.dom.serializer import outer_html
from visible_copy.dom.tree import NodeTree


@pytest.fixture
def tree():
    tree = NodeTree()
    tree.root = tree.create_element("div", {"id": "root", "class": "a b"})
    return tree


def test_removed_ids_are_never_reused(tree):
    child = tree.append_child(tree.root, tree.create_element("p"))
    tree.remove(child)

    replacement = tree.create_element("p")

    assert child not in tree
    assert tree.get(child) is None
    assert replacement != child


def test_remove_discards_whole_subtree(tree):
    section = tree.append_child(tree.root, tree.create_element("section"))
    paragraph = tree.append_child(section, tree.create_element("p", text="hi"))
    text_node = tree.children(paragraph)[0]

    tree.remove(section)

    assert tree.children(tree.root) == []
    for node_id in (section, paragraph, text_node):
        assert node_id not in tree


def test_remove_child_rejects_non_children(tree):
    other = tree.create_element("span")
    with pytest.raises(ValueError):
        tree.remove_child(tree.root, other)


def test_explicit_ids_must_be_unique(tree):
    tree.create_node(NodeKind.ELEMENT, tag="span", node_id=10)
    with pytest.raises(ValueError):
        tree.create_node(NodeKind.ELEMENT, tag="span", node_id=10)
    assert tree.create_element("b") == 11


def test_append_child_moves_node(tree):
    first = tree.append_child(tree.root, tree.create_element("ul"))
    second = tree.append_child(tree.root, tree.create_element("ol"))
    item = tree.append_child(first, tree.create_element("li"))

    tree.append_child(second, item)

    assert tree.children(first) == []
    assert tree.children(second) == [item]
    assert tree.parent(item) == second


def test_attributes_are_case_insensitive(tree):
    tree.set_attribute(tree.root, "Title", "x")
    assert tree.get_attribute(tree.root, "title") == "x"

    tree.set_attribute(tree.root, "TITLE", "y")
    assert tree.node(tree.root).attributes.count(("Title", "y")) == 1

    tree.remove_attribute(tree.root, "title")
    assert not tree.has_attribute(tree.root, "Title")


def test_class_helpers(tree):
    tree.add_class(tree.root, "c")
    tree.add_class(tree.root, "a")
    tree.remove_class(tree.root, "b")

    assert tree.class_list(tree.root) == ["a", "c"]


def test_mutations_bump_version(tree):
    version = tree.version
    tree.set_attribute(tree.root, "lang", "en")
    assert tree.version > version


def test_traversal_helpers(tree):
    section = tree.append_child(tree.root, tree.create_element("section"))
    link = tree.append_child(section, tree.create_element("a", {"href": "/x"}, text="go"))

    assert list(tree.ancestors(link)) == [section, tree.root]
    assert tree.closest(link, lambda node: node.tag == "section") == section
    assert tree.contains(tree.root, link)
    assert not tree.contains(link, section)
    assert tree.find_element("a") == link
    assert tree.get_element_by_id("root") == tree.root
    assert tree.text_content(tree.root) == "go"


def test_clone_is_detached_and_maps_origins(tree):
    paragraph = tree.append_child(tree.root, tree.create_element("p", {"class": "x"}, text="hello"))

    clone, origins = tree.clone(tree.root)
    clone_paragraph = clone.children(clone.root)[0]
    clone.set_attribute(clone_paragraph, "class", "changed")

    assert origins[clone.root] == tree.root
    assert origins[clone_paragraph] == paragraph
    assert tree.get_attribute(paragraph, "class") == "x"
    assert outer_html(clone, clone.root) == '<div id="root" class="a b"><p class="changed">hello</p></div>'


def test_set_text_replaces_children(tree):
    tree.append_child(tree.root, tree.create_element("b", text="old"))
    tree.set_text(tree.root, "new")

    assert tree.text_content(tree.root) == "new"
    assert len(tree.children(tree.root)) == 1
